"""
Authentication routes: login, logout, registration, profile.
JSON endpoints shared by the admin, front-desk and guest portals.
"""

from flask import Blueprint
from flask_login import login_user, logout_user, login_required, current_user
from flask_wtf.csrf import generate_csrf

from blueprints.auth.forms import LoginForm, RegisterForm, ProfileForm, ChangePasswordForm
from models.guest import register_guest, update_guest_profile, update_guest_password, get_guest_by_id
from models.user import (
    User, sign_in, check_password, get_user_by_id, update_user, update_password
)
from utils.api_response import api_success, api_error
from utils.decorators import permission_required
from utils.helpers import get_json_body, strip_private_fields
from utils.messages import MESSAGES
from utils.permissions import filter_writable_fields, has_permission

auth_bp = Blueprint('auth', __name__)


def _current_row() -> dict:
    """Full users or guests row for the signed-in account."""
    if current_user.kind == 'guest':
        return get_guest_by_id(current_user.entity_id)
    return get_user_by_id(current_user.entity_id)


@auth_bp.route('/csrf-token')
def csrf_token():
    """CSRF token for the X-CSRFToken header of later writes."""
    return api_success(data={'csrf_token': generate_csrf()})


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Sign in an admin, front-desk operator or guest.

    Body: {"username": str, "password": str, "remember_me": bool}
    """
    form = LoginForm()
    if not form.validate_on_submit():
        return api_error(form.first_error(), status=400, errors=form.errors)

    user = sign_in(form.username.data, form.password.data)
    login_user(user, remember=form.remember_me.data)

    return api_success(
        data=user.to_dict(),
        message=MESSAGES['login_success'].format(name=user.full_name or user.username)
    )


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    """Logout current user."""
    logout_user()
    return api_success(message=MESSAGES['logout_success'])


@auth_bp.route('/register', methods=['POST'])
def register():
    """
    Guest self-registration. Signs the new guest in.

    Body: username, password, confirm_password, email, first_name, last_name,
    contact_number (optional)
    """
    form = RegisterForm()
    if not form.validate_on_submit():
        return api_error(form.first_error(), status=400, errors=form.errors)

    guest = register_guest(
        username=form.username.data,
        password=form.password.data,
        email=form.email.data,
        first_name=form.first_name.data,
        last_name=form.last_name.data,
        contact_number=form.contact_number.data or None,
    )
    login_user(User(guest, 'guest'))

    return api_success(
        data=strip_private_fields(guest),
        message=MESSAGES['registration_success'],
        status=201
    )


@auth_bp.route('/me')
@login_required
def me():
    """Signed-in account with its profile row."""
    return api_success(data={
        **current_user.to_dict(),
        'profile': strip_private_fields(_current_row()),
    })


@auth_bp.route('/profile', methods=['PUT', 'PATCH'])
@login_required
def profile_edit():
    """Edit own profile."""
    form = ProfileForm()
    if not form.validate_on_submit():
        return api_error(form.first_error(), status=400, errors=form.errors)

    fields = form.submitted_fields()
    if current_user.kind == 'guest':
        if not has_permission(current_user, 'profile.edit'):
            return api_error(MESSAGES['permission_denied'], status=403)
        updated = update_guest_profile(
            current_user.entity_id, filter_writable_fields('guest', 'guests', fields)
        )
    else:
        allowed = {k: v for k, v in fields.items()
                   if k in ('email', 'first_name', 'last_name', 'contact_number')}
        updated = update_user(current_user.entity_id, **allowed)

    return api_success(data=strip_private_fields(updated), message=MESSAGES['profile_updated'])


@auth_bp.route('/change-password', methods=['POST'])
@login_required
def change_password():
    """Change own password after confirming the current one."""
    form = ChangePasswordForm()
    if not form.validate_on_submit():
        return api_error(form.first_error(), status=400, errors=form.errors)

    if not check_password(_current_row(), form.current_password.data):
        return api_error('Current password is incorrect', status=400)

    if current_user.kind == 'guest':
        update_guest_password(current_user.entity_id, form.new_password.data)
    else:
        update_password(current_user.entity_id, form.new_password.data)

    return api_success(message=MESSAGES['password_updated'])


@auth_bp.route('/accounts')
@login_required
@permission_required('accounts.manage')
def list_accounts():
    """Portal accounts (admin only)."""
    from models.user import get_all_users

    return api_success(data=strip_private_fields(get_all_users(active_only=False)))


@auth_bp.route('/accounts', methods=['POST'])
@login_required
@permission_required('accounts.manage')
def create_account():
    """Create an admin or front-desk account (admin only)."""
    from models.user import create_user

    data = get_json_body()
    user = create_user(
        username=data.get('username'),
        email=data.get('email'),
        password=data.get('password'),
        first_name=data.get('first_name') or '',
        last_name=data.get('last_name') or '',
        role=data.get('role', 'front_desk'),
        contact_number=data.get('contact_number'),
    )
    return api_success(data=strip_private_fields(user), message=MESSAGES['account_created'], status=201)


@auth_bp.route('/accounts/<int:user_id>', methods=['DELETE'])
@login_required
@permission_required('accounts.manage')
def deactivate_account(user_id):
    """Deactivate an account (admin only). Admins cannot deactivate themselves."""
    from models.user import delete_user

    if current_user.kind == 'user' and current_user.entity_id == user_id:
        return api_error('You cannot deactivate your own account', status=400)

    delete_user(user_id)
    return api_success(message=MESSAGES['account_deactivated'])


@auth_bp.route('/accounts/<int:user_id>/role', methods=['PUT'])
@login_required
@permission_required('accounts.manage')
def change_account_role(user_id):
    """
    Change an account's role (admin only).

    Body: {"role": "admin" | "front_desk"}
    """
    from models.user import update_user

    data = get_json_body()
    role = data.get('role')
    if not role:
        return api_error(MESSAGES['field_required'].format(field='role'), status=400)
    if current_user.kind == 'user' and current_user.entity_id == user_id:
        return api_error('You cannot change your own role', status=400)

    user = update_user(user_id, role=role)
    return api_success(data=strip_private_fields(user), message=MESSAGES['account_role_updated'])
