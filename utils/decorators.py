"""
Route decorators for authentication and authorization.
Provides capability-based access control for API routes.
"""

from functools import wraps
from flask import abort
from flask_login import login_required, current_user


def permission_required(*permission_codes: str):
    """
    Decorator to require at least one of the given permissions for a route.

    Usage:
        @bp.route('/reservations')
        @login_required
        @permission_required('reservations.view', 'reservations.view_own')
        def list_reservations():
            ...

    Args:
        permission_codes: Permission codes, any one of which grants access

    Returns:
        Decorator function
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            from utils.permissions import has_permission

            if not current_user.is_authenticated:
                abort(401)

            if not any(has_permission(current_user, code) for code in permission_codes):
                abort(403)

            return func(*args, **kwargs)
        return wrapper
    return decorator


# Re-export login_required for convenience
__all__ = ['login_required', 'permission_required']
