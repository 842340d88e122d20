"""
API routes for JSON endpoints.
Split into smaller modules by entity; this module owns the blueprint.
"""

from flask import Blueprint, current_app

from utils.api_response import api_success

api_bp = Blueprint('api', __name__)


@api_bp.route('/health')
def health_check():
    """
    Health check endpoint (no authentication required).

    Returns:
        JSON with status and version
    """
    return api_success(data={
        'status': 'ok',
        'version': current_app.config.get('APP_VERSION', '1.0.0'),
        'app': current_app.config.get('APP_NAME', 'HotelBooking'),
    })


# Import and register routes from submodules
from blueprints.api import bookings, resources  # noqa: E402

resources.register_routes(api_bp)
bookings.register_routes(api_bp)
