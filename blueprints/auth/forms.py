"""
Authentication forms using Flask-WTF.
Validates login payloads sent as JSON or form data.
"""

from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, BooleanField
from wtforms.validators import DataRequired, Length


class LoginForm(FlaskForm):
    """Login form with username and password."""

    class Meta:
        # Session-cookie JSON API; clients do not fetch a CSRF token first
        csrf = False

    username = StringField('Username', validators=[
        DataRequired(message='Username is required'),
        Length(max=80)
    ])

    password = PasswordField('Password', validators=[
        DataRequired(message='Password is required')
    ])

    remember_me = BooleanField('Remember me')

    def first_error(self) -> str:
        """First validation message, in field order."""
        for field in (self.username, self.password, self.remember_me):
            if field.errors:
                return field.errors[0]
        return 'Invalid login data'
