"""
Authentication forms using Flask-WTF.
Forms read JSON bodies as well as form posts. CSRF is checked by CSRFProtect
through the X-CSRFToken header, so the forms do not carry their own token
field.
"""

from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, BooleanField
from wtforms.validators import DataRequired, Length, EqualTo, Optional, ValidationError

from utils.validators import validate_email as is_valid_email
from utils.validators import validate_password, validate_phone
from utils.validators import validate_username as check_username


class JSONForm(FlaskForm):
    """Base form without a per-form CSRF field."""

    class Meta:
        csrf = False

    def first_error(self) -> str:
        """First validation message, for the JSON error envelope."""
        for messages in self.errors.values():
            if messages:
                return messages[0]
        return 'Invalid input'


def _strong_password(form, field):
    valid, error = validate_password(field.data)
    if not valid:
        raise ValidationError(error)


def _email(form, field):
    if field.data and not is_valid_email(field.data):
        raise ValidationError('Invalid email address')


def _phone(form, field):
    if field.data and not validate_phone(field.data):
        raise ValidationError('Invalid contact number')


class LoginForm(JSONForm):
    """Login form with username and password."""

    username = StringField('Username', validators=[
        DataRequired(message='Username is required')
    ])

    password = PasswordField('Password', validators=[
        DataRequired(message='Password is required')
    ])

    remember_me = BooleanField('Remember me')


class RegisterForm(JSONForm):
    """Guest self-registration."""

    username = StringField('Username', validators=[
        DataRequired(message='Username is required')
    ])

    password = PasswordField('Password', validators=[
        DataRequired(message='Password is required'),
        _strong_password,
    ])

    confirm_password = PasswordField('Confirm password', validators=[
        DataRequired(message='Please confirm the password'),
        EqualTo('password', message='Passwords do not match')
    ])

    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        _email,
    ])

    first_name = StringField('First name', validators=[
        DataRequired(message='First name is required'),
        Length(max=100)
    ])

    last_name = StringField('Last name', validators=[
        DataRequired(message='Last name is required'),
        Length(max=100)
    ])

    contact_number = StringField('Contact number', validators=[Optional(), _phone])

    def validate_username(self, field):
        valid, error = check_username(field.data)
        if not valid:
            raise ValidationError(error)


class ProfileForm(JSONForm):
    """Profile editing form. Only fields present in the request are applied."""

    email = StringField('Email', validators=[Optional(), _email])
    first_name = StringField('First name', validators=[Optional(), Length(max=100)])
    last_name = StringField('Last name', validators=[Optional(), Length(max=100)])
    contact_number = StringField('Contact number', validators=[Optional(), _phone])
    street = StringField('Street', validators=[Optional(), Length(max=200)])
    city = StringField('City', validators=[Optional(), Length(max=100)])
    state_province = StringField('State / province', validators=[Optional(), Length(max=100)])
    zip_code = StringField('ZIP code', validators=[Optional(), Length(max=20)])
    country = StringField('Country', validators=[Optional(), Length(max=100)])

    def submitted_fields(self) -> dict:
        """Non-empty fields from the request."""
        return {
            name: field.data for name, field in self._fields.items()
            if field.data not in (None, '')
        }


class ChangePasswordForm(JSONForm):
    """Password change form."""

    current_password = PasswordField('Current password', validators=[
        DataRequired(message='Current password is required')
    ])

    new_password = PasswordField('New password', validators=[
        DataRequired(message='New password is required'),
        _strong_password,
    ])

    confirm_password = PasswordField('Confirm password', validators=[
        DataRequired(message='Please confirm the password'),
        EqualTo('new_password', message='Passwords do not match')
    ])
