"""
Input validation helper functions.
Parse and validate request values; each returns (value, error_message).
"""

import re
from datetime import datetime


def validate_email(email: str) -> bool:
    """
    Validate email format.

    Args:
        email: Email address to validate

    Returns:
        True if valid email format
    """
    if not email:
        return False

    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(pattern, email))


def validate_password(password: str, min_length: int = 6) -> tuple:
    """
    Validate password strength.

    Args:
        password: Password to validate
        min_length: Minimum password length

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not password:
        return False, 'Password is required'

    if len(password) < min_length:
        return False, f'Password must be at least {min_length} characters'

    return True, ''


def validate_date(value, field: str = 'Date', required: bool = True) -> tuple:
    """
    Parse a YYYY-MM-DD date.

    Args:
        value: Raw value from the request
        field: Field label for the error message
        required: Missing value is an error

    Returns:
        Tuple of (date or None, error_message)
    """
    if value in (None, ''):
        return None, (f'{field} is required' if required else '')

    try:
        return datetime.strptime(str(value), '%Y-%m-%d').date(), ''
    except ValueError:
        return None, f'{field} must be in YYYY-MM-DD format'


def validate_time(value, field: str = 'Time', required: bool = True) -> tuple:
    """
    Parse an HH:MM time of day (seconds are dropped).

    Returns:
        Tuple of (time or None, error_message)
    """
    if value in (None, ''):
        return None, (f'{field} is required' if required else '')

    for fmt in ('%H:%M', '%H:%M:%S'):
        try:
            return datetime.strptime(str(value), fmt).time().replace(second=0), ''
        except ValueError:
            continue
    return None, f'{field} must be in HH:MM format'


def validate_positive_integer(value, field: str = 'Value', required: bool = True) -> tuple:
    """
    Parse an integer >= 1. Booleans and floats with a fraction are rejected.

    Returns:
        Tuple of (int or None, error_message)
    """
    if value in (None, ''):
        return None, (f'{field} is required' if required else '')

    if isinstance(value, bool):
        return None, f'{field} must be a whole number'

    if isinstance(value, float):
        if not value.is_integer():
            return None, f'{field} must be a whole number'
        value = int(value)

    try:
        number = int(value)
    except (TypeError, ValueError):
        return None, f'{field} must be a whole number'

    if number < 1:
        return None, f'{field} must be at least 1'

    return number, ''


def validate_number(value, field: str = 'Value', required: bool = True) -> tuple:
    """
    Parse a number (int or float, or a numeric string).

    Returns:
        Tuple of (float or None, error_message)
    """
    if value in (None, ''):
        return None, (f'{field} is required' if required else '')

    if isinstance(value, bool):
        return None, f'{field} must be a number'

    try:
        return float(value), ''
    except (TypeError, ValueError):
        return None, f'{field} must be a number'


def parse_bool(value, default: bool = False) -> bool:
    """Interpret query-string and JSON booleans ('1', 'true', 'yes', True)."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


def sanitize_input(text: str, max_length: int = None) -> str:
    """
    Sanitize text input by trimming and limiting length.

    Args:
        text: Text to sanitize
        max_length: Maximum length (optional)

    Returns:
        Sanitized text
    """
    if not text:
        return ''

    # Strip whitespace
    sanitized = str(text).strip()

    # Limit length if specified
    if max_length and len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized
