"""
Authentication routes: login, logout, current user.
Session authentication for the JSON API through Flask-Login.
"""

from flask import Blueprint, current_app
from flask_login import login_user, logout_user, login_required, current_user

from blueprints.auth.forms import LoginForm
from models.user import User, get_user_by_username, update_last_login, check_password
from utils.api_response import api_success, api_error
from utils.messages import get_message

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Log in with username and password.

    Request body (JSON or form):
        username, password, remember_me (optional)

    Returns:
        JSON with the logged-in user
    """
    form = LoginForm()

    if not form.validate_on_submit():
        return api_error(form.first_error(), 400, code='validation_error')

    # Get user by username
    user_dict = get_user_by_username(form.username.data)

    # Check credentials
    if user_dict is None or not check_password(user_dict, form.password.data):
        current_app.logger.info('Failed login for %s', form.username.data)
        return api_error(get_message('invalid_credentials'), 401, code='invalid_credentials')

    # Check if user is active
    if not user_dict.get('active'):
        return api_error(get_message('account_inactive'), 403, code='account_inactive')

    user = User(user_dict)
    login_user(user, remember=form.remember_me.data)

    # Update last login timestamp
    update_last_login(user.id)

    return api_success(
        data=user.to_dict(),
        message=get_message('login_success', name=user.full_name or user.username)
    )


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    """Logout current user."""
    logout_user()
    return api_success(message=get_message('logout_success'))


@auth_bp.route('/me')
@login_required
def me():
    """Current user."""
    return api_success(data=current_user.to_dict())
