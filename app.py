"""
Flask application entry point for the OpenCX back office.
"""
import logging
import os
from flask import Flask, jsonify, request, abort
from flask_login import LoginManager, current_user
from flask_wtf.csrf import CSRFProtect
from werkzeug.exceptions import HTTPException
from database import db, init_db
import config
from services.errors import ServiceError
from services.logging_setup import configure_error_monitoring, configure_logging

logger = logging.getLogger(__name__)

csrf = CSRFProtect()
login_manager = LoginManager()

MANAGEMENT_BLUEPRINTS = {'compliance', 'audit', 'customers', 'transactions'}
BLUEPRINT_PERMISSIONS = {
    'compliance': 'can_review_compliance',
    'audit': 'can_view_audit',
    'customers': 'can_manage_customers',
    'transactions': 'can_transact',
}


def create_app(config_object=None):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object or config.get_config())
    config.validate_runtime(app.config)
    configure_logging(bool(app.config.get('STRUCTURED_LOGGING', True)))
    configure_error_monitoring(app.config.get('SENTRY_DSN', ''))

    # Initialize database
    init_db(app)

    # Initialize CSRF protection
    csrf.init_app(app)
    login_manager.init_app(app)

    from models.user import User

    @login_manager.user_loader
    def load_user(user_id: str):
        if not user_id:
            return None
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'unauthenticated', 'message': 'Please log in to continue.'}), 401

    # Register blueprints
    from routes.auth import auth_bp
    from routes.compliance import compliance_bp
    from routes.audit import audit_bp
    from routes.customers import customers_bp
    from routes.transactions import transactions_bp

    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(compliance_bp, url_prefix='/api/compliance')
    app.register_blueprint(audit_bp, url_prefix='/api/audit')
    app.register_blueprint(customers_bp, url_prefix='/api/customers')
    app.register_blueprint(transactions_bp, url_prefix='/api/transactions')

    @app.before_request
    def require_role_for_management_routes():
        """Enforce role permissions for signed-in users.

        Anonymous requests pass through: the services decide whether an
        unauthenticated read yields an empty result or an error.
        """
        endpoint = request.endpoint or ''
        blueprint_name = endpoint.split('.', 1)[0]
        if blueprint_name not in MANAGEMENT_BLUEPRINTS:
            return None
        if not current_user.is_authenticated:
            return None

        permission_attr = BLUEPRINT_PERMISSIONS.get(blueprint_name, 'is_admin')
        if not getattr(current_user, permission_attr, False):
            abort(403)
        return None

    @app.errorhandler(ServiceError)
    def handle_service_error(exc: ServiceError):
        db.session.rollback()
        if exc.status_code >= 500:
            logger.error('Service failure on %s: %s', request.path, exc.message)
        else:
            logger.info('Request to %s refused (%s): %s', request.path, exc.code, exc.message)
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        code = (exc.name or 'error').lower().replace(' ', '_')
        return jsonify({'error': code, 'message': exc.description}), exc.code

    return app


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    app = create_app()
    app.run(host='0.0.0.0', port=port, debug=False)
