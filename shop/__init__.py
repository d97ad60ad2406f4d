"""Flask application factory."""
import os
import traceback

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException


def create_app(config_object='config.Config', repository=None, image_store=None):
    """
    Create and configure the Flask application.

    The customer repository and the image store are built once here and
    handed to the request handlers through ``app.extensions``. Tests pass
    their own instances to replace either one.

    Args:
        config_object: Import path or object for app.config.from_object
        repository: CustomerRepository-compatible object (built from config if None)
        image_store: StorageService-compatible object (built from config if None)
    """
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.json.sort_keys = app.config.get('JSON_SORT_KEYS', False)

    # Initialize Sentry for error tracking in production
    if os.getenv('SENTRY_DSN') and app.config.get('ENV') == 'production':
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=os.getenv('SENTRY_DSN'),
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,
            environment=app.config.get('ENV'),
            release=os.getenv('GIT_COMMIT', 'unknown')
        )

    # Production: trust X-Forwarded-* from the reverse proxy
    if app.config.get('ENV') == 'production':
        from werkzeug.middleware.proxy_fix import ProxyFix
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    # Setup Prometheus metrics instrumentation
    from shop.blueprints.metrics import setup_metrics_instrumentation
    setup_metrics_instrumentation(app)

    # Collaborators
    if repository is None:
        from shop.database import init_db
        from shop.services.customer_repository import CustomerRepository
        repository = CustomerRepository(init_db(app))
    if image_store is None:
        from shop.services.storage_service import StorageService
        image_store = StorageService.from_config(app.config)

    app.extensions['customer_repository'] = repository
    app.extensions['image_store'] = image_store

    # Error Handlers
    from shop.exceptions import ShopError

    @app.errorhandler(ShopError)
    def handle_shop_error(error):
        """Render application exceptions as {success: false, error}."""
        if error.status_code >= 500:
            app.logger.error(f"ShopError [{error.status_code}]: {error.message}")
        else:
            app.logger.info(f"ShopError [{error.status_code}]: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'success': False, 'error': error.description or error.name}), error.code

    @app.errorhandler(Exception)
    def internal_error(error):
        app.logger.error(f"Unhandled Exception: {error}")
        app.logger.error(f"Traceback: {traceback.format_exc()}")
        return jsonify({'success': False, 'error': 'Internal Server Error'}), 500

    # Register blueprints
    from shop.blueprints.main import main_bp
    from shop.blueprints.api import api_bp
    from shop.blueprints.metrics import metrics_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(api_bp)
    app.register_blueprint(metrics_bp)

    # Register CLI commands
    from shop.cli_commands import init_cli_commands
    init_cli_commands(app)

    return app
