"""
Centralized API messages.
User-facing success and error text in one place for consistency.
"""

MESSAGES = {
    # Success messages
    'login_success': 'Welcome {name}',
    'logout_success': 'Logged out',
    'booking_created': 'Reservation created',
    'booking_updated': 'Reservation updated',
    'booking_cancelled': 'Reservation cancelled',
    'booking_deleted': 'Reservation deleted',
    'resource_created': '{name} created',
    'resource_updated': '{name} updated',
    'resource_deleted': '{name} deleted',
    'resource_enabled': '{name} is now available for booking',
    'resource_disabled': '{name} is no longer available for booking',

    # Error messages
    'invalid_credentials': 'Invalid username or password',
    'account_inactive': 'Account is disabled',
    'authentication_required': 'Authentication required',
    'admin_required': 'Administrator access required',
    'json_required': 'Request body must be a JSON object',
    'not_found': 'Resource not found',
    'method_not_allowed': 'Method not allowed',
    'internal_error': 'Internal server error',
}


def get_message(key: str, **kwargs) -> str:
    """
    Get message with optional formatting.

    Args:
        key: Message key
        **kwargs: Format parameters

    Returns:
        Formatted message or key if not found
    """
    message = MESSAGES.get(key, key)
    if kwargs:
        return message.format(**kwargs)
    return message
