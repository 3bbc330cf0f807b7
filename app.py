"""
Grand Hotel - Hotel Management Backend
Flask application factory and initialization
"""

import os
import click
import logging
from flask import Flask, g
from flask_wtf.csrf import CSRFError
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Import configuration
from config import config

# Import extensions
from extensions import login_manager, csrf

# Import database functions
from database import close_db, init_db, StoreError, NotFoundError, ConstraintError


def create_app(config_name=None):
    """
    Application factory for Flask app.

    Args:
        config_name: Configuration name ('development', 'production', 'test')

    Returns:
        Flask application instance
    """
    # Determine config
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    # Create Flask app
    app = Flask(__name__)

    # Load configuration
    config_class = config[config_name]
    app.config.from_object(config_class)
    if hasattr(config_class, 'validate'):
        config_class.validate()

    # Initialize extensions
    initialize_extensions(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Register CLI commands
    register_cli_commands(app)

    # Register teardown handlers
    register_teardown_handlers(app)

    # Configure logging
    configure_logging(app)

    return app


def initialize_extensions(app):
    """Initialize Flask extensions."""
    login_manager.init_app(app)
    csrf.init_app(app)


def register_blueprints(app):
    """Register Flask blueprints."""
    from blueprints.auth.routes import auth_bp
    from blueprints.api import api_bp

    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(api_bp, url_prefix='/api')


def register_error_handlers(app):
    """Map domain errors and HTTP errors to the JSON error envelope."""
    from models.user import AuthError
    from models.reservation import RoomUnavailableError
    from utils.api_response import api_error
    from utils.messages import MESSAGES
    from utils.permissions import CapabilityError

    @app.errorhandler(RoomUnavailableError)
    def room_unavailable_error(error):
        return api_error(str(error), status=409, conflicts=error.conflicts)

    @app.errorhandler(ValueError)
    def validation_error(error):
        return api_error(str(error), status=400)

    @app.errorhandler(AuthError)
    def auth_error(error):
        return api_error(str(error), status=401)

    @app.errorhandler(CapabilityError)
    def capability_error(error):
        return api_error(str(error), status=403)

    @app.errorhandler(NotFoundError)
    def store_not_found_error(error):
        return api_error(MESSAGES['not_found'].format(entity='Record'), status=404)

    @app.errorhandler(ConstraintError)
    def constraint_error(error):
        app.logger.warning('Constraint violation: %s', error)
        return api_error(MESSAGES['constraint_violation'], status=409)

    @app.errorhandler(StoreError)
    def store_error(error):
        app.logger.error('Store error: %s', error)
        return api_error(MESSAGES['store_error'], status=500)

    @app.errorhandler(CSRFError)
    def csrf_error(error):
        return api_error(error.description, status=400)

    @app.errorhandler(400)
    def bad_request_error(error):
        return api_error(getattr(error, 'description', 'Bad request'), status=400)

    @app.errorhandler(401)
    def unauthorized_error(error):
        return api_error(MESSAGES['login_required'], status=401)

    @app.errorhandler(403)
    def forbidden_error(error):
        return api_error(MESSAGES['permission_denied'], status=403)

    @app.errorhandler(404)
    def not_found_error(error):
        return api_error(MESSAGES['not_found'].format(entity='Resource'), status=404)

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        return api_error('Method not allowed', status=405)

    @app.errorhandler(500)
    def internal_error(error):
        # Rollback database on error
        db = g.get('db')
        if db:
            db.rollback()
        return api_error(MESSAGES['store_error'], status=500)


def register_cli_commands(app):
    """Register Flask CLI commands."""

    @app.cli.command('init-db')
    def init_db_command():
        """Initialize database with schema and seed data."""
        click.echo('Initializing database...')
        with app.app_context():
            init_db()
        click.echo('Database initialized successfully!')

    @app.cli.command('create-user')
    @click.argument('username')
    @click.argument('email')
    @click.option('--role', type=click.Choice(['admin', 'front_desk']), default='admin',
                  show_default=True)
    @click.option('--first-name', default='Hotel', show_default=True)
    @click.option('--last-name', default='Operator', show_default=True)
    @click.password_option()
    def create_user_command(username, email, role, first_name, last_name, password):
        """Create a new portal account."""
        from models.user import create_user

        with app.app_context():
            try:
                user = create_user(
                    username=username,
                    email=email,
                    password=password,
                    first_name=first_name,
                    last_name=last_name,
                    role=role
                )
                click.echo(f"User created successfully! ID: {user['user_id']}")
            except (ValueError, StoreError) as e:
                click.echo(f'Error creating user: {str(e)}', err=True)


def register_teardown_handlers(app):
    """Register teardown handlers."""

    @app.teardown_appcontext
    def teardown_db(error):
        """Close database connection at end of request."""
        close_db(error)


def configure_logging(app):
    """Configure application logging."""
    if not app.debug and not app.testing:
        # Production logging
        if not os.path.exists('logs'):
            os.mkdir('logs')

        file_handler = logging.FileHandler('logs/grand_hotel.log')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        # Root logger so module loggers reach the file too
        logging.getLogger().addHandler(file_handler)
        logging.getLogger().setLevel(logging.INFO)

        app.logger.setLevel(logging.INFO)
        app.logger.info('%s startup', app.config.get('APP_NAME', 'Grand Hotel'))
    else:
        # Development logging
        app.logger.setLevel(logging.DEBUG)


# Create application instance for development server
if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', debug=True)
