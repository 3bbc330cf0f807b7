"""
Flask extensions initialization.
Extensions are initialized here and then initialized with the app in app.py.
"""

from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect

# Initialize Flask-Login
login_manager = LoginManager()

# Initialize CSRF Protection
csrf = CSRFProtect()


@login_manager.user_loader
def load_user(session_id):
    """
    Load the signed-in account for Flask-Login.

    Args:
        session_id: Namespaced id ('user:<id>' or 'guest:<id>')

    Returns:
        User object or None if not found
    """
    from models.user import load_account

    return load_account(session_id)


@login_manager.unauthorized_handler
def unauthorized():
    """JSON 401 instead of a redirect to a login page."""
    from utils.api_response import api_error
    from utils.messages import MESSAGES

    return api_error(MESSAGES['login_required'], status=401)
