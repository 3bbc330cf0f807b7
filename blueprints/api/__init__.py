"""
Hotel API routes package.
Split into smaller modules by entity for maintainability.
"""

from flask import Blueprint, current_app

from utils.api_response import api_success

# Create the API blueprint
api_bp = Blueprint('api', __name__)


@api_bp.route('/health')
def health_check():
    """Health check endpoint (no authentication required)."""
    return api_success(data={
        'status': 'ok',
        'version': current_app.config.get('APP_VERSION', '1.0.0'),
        'app': current_app.config.get('APP_NAME', 'Grand Hotel'),
    })


# Import and register routes from submodules
from blueprints.api import guests
from blueprints.api import rooms
from blueprints.api import staff
from blueprints.api import reservations
from blueprints.api import payments
from blueprints.api import dashboard

# Register all route functions on the blueprint
guests.register_routes(api_bp)
rooms.register_routes(api_bp)
staff.register_routes(api_bp)
reservations.register_routes(api_bp)
payments.register_routes(api_bp)
dashboard.register_routes(api_bp)
