"""
Route decorators for authentication and authorization.
Provides role-based access control for API routes.
"""

from functools import wraps
from flask_login import login_required, current_user

from utils.api_response import api_error
from utils.messages import get_message


def admin_required(func):
    """
    Decorator to require the admin role for a route.

    Usage:
        @api_bp.route('/resources', methods=['POST'])
        @login_required
        @admin_required
        def create_resource():
            ...
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated or current_user.role != 'admin':
            return api_error(get_message('admin_required'), 403, code='permission_denied')
        return func(*args, **kwargs)
    return wrapper


def current_principal():
    """Booking principal for the logged-in user."""
    from models.booking import Principal
    return Principal.from_user(current_user)


# Re-export login_required for convenience
__all__ = ['login_required', 'admin_required', 'current_principal']
