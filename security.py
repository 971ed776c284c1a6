"""
Security Utilities & Middleware
Tenant scoping, CORS, response headers and JSON error handling
"""
import os
import secrets
from functools import wraps
from typing import Callable, Dict, Any
from flask import Flask, request, jsonify, Response, g
from flask_cors import CORS
import logging

logger = logging.getLogger(__name__)

QUIET_PATHS = ('/health', '/health/ready', '/health/ping')

# Settings that should be present outside development
PRODUCTION_SETTINGS = ('SECRET_KEY', 'DATABASE_URL', 'SMTP_HOST', 'FROM_EMAIL')

ERROR_MESSAGES = {
    400: ('Bad Request', 'The request could not be understood or was missing required parameters'),
    404: ('Not Found', 'The requested resource was not found'),
    405: ('Method Not Allowed', 'The method is not allowed for the requested URL'),
    413: ('Payload Too Large', 'The uploaded attachment or request is too large'),
}


def ensure_secret_key(config: Dict[str, Any]) -> str:
    """Return the configured SECRET_KEY, or a generated one when it is missing or short."""
    secret_key = config.get('SECRET_KEY')
    if secret_key and len(secret_key) >= 32:
        return secret_key

    if os.environ.get('FLASK_ENV') == 'production':
        logger.error("No secure SECRET_KEY in production! Add SECRET_KEY to the environment.")
    return secrets.token_hex(32)


def setup_security_headers(app: Flask):
    @app.after_request
    def add_security_headers(response: Response) -> Response:
        response.headers['X-Frame-Options'] = 'SAMEORIGIN'
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'

        # HTTPS only in production
        if not app.debug:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        return response


def setup_cors(app: Flask, config: Dict[str, Any]):
    """
    Configure CORS so the dashboard can send the tenant headers

    Args:
        app: Flask application instance
        config: Application configuration dictionary
    """
    cors_origins = config.get('CORS_ORIGINS', ['*'])

    if not app.debug and '*' in cors_origins:
        logger.warning("⚠️  Using wildcard CORS in production! Set CORS_ORIGINS environment variable.")

    CORS(
        app,
        origins=cors_origins,
        methods=config.get('CORS_METHODS'),
        allow_headers=config.get('CORS_ALLOW_HEADERS'),
        expose_headers=['Content-Disposition'],
        supports_credentials=True,
        max_age=3600
    )

    logger.info(f"CORS configured: origins={cors_origins}")


def setup_tenant_context(app: Flask):
    """
    Resolve the tenant (company) and acting user for each request.

    The frontend sends X-Company-Id and X-User-Id; query parameters are
    accepted as a fallback for links opened straight from emails.
    """
    @app.before_request
    def load_tenant():
        g.company_id = (
            request.headers.get('X-Company-Id')
            or request.args.get('company_id')
        )
        g.user_id = (
            request.headers.get('X-User-Id')
            or request.args.get('user_id')
        )


def require_company(f: Callable) -> Callable:
    """
    Decorator that rejects requests without a tenant

    Usage:
        @bp.route('/api/products')
        @require_company
        def list_products():
            ...
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not getattr(g, 'company_id', None):
            logger.warning(f"Missing company context for {request.path}")
            return jsonify({'success': False, 'error': 'Company context required'}), 401
        return f(*args, **kwargs)

    return decorated_function


def setup_error_handlers(app: Flask):
    """
    Register JSON error handlers that don't expose stack traces

    Args:
        app: Flask application instance
    """
    def make_handler(code):
        error, message = ERROR_MESSAGES[code]

        def handler(_):
            return jsonify({'success': False, 'error': error, 'message': message}), code
        return handler

    for code in ERROR_MESSAGES:
        app.register_error_handler(code, make_handler(code))

    @app.errorhandler(500)
    def internal_server_error(error):
        logger.error(f"Internal server error: {error}", exc_info=True)
        body = {
            'success': False,
            'error': 'Internal Server Error',
            'message': 'An error occurred while processing your request'
        }
        if app.debug:
            body['details'] = str(error)
        return jsonify(body), 500


def setup_request_logging(app: Flask):
    @app.before_request
    def log_request():
        if request.path in QUIET_PATHS:
            return

        logger.info(
            f"Request: {request.method} {request.path} "
            f"company={getattr(g, 'company_id', None) or '-'} "
            f"user={getattr(g, 'user_id', None) or '-'}"
        )

    @app.after_request
    def log_response(response: Response) -> Response:
        if request.path not in QUIET_PATHS:
            logger.info(
                f"Response: {request.method} {request.path} "
                f"status={response.status_code} "
                f"size={response.content_length}"
            )
        return response


def warn_missing_settings(app: Flask) -> bool:
    """Log production settings that are unset; returns True when all are present."""
    missing = [name for name in PRODUCTION_SETTINGS if not app.config.get(name)]
    for name in missing:
        logger.warning(f"Missing setting: {name}")
    return not missing


def setup_security(app: Flask, config: Dict[str, Any]):
    """
    Setup all security features for the application

    Args:
        app: Flask application instance
        config: Application configuration dictionary
    """
    app.secret_key = ensure_secret_key(config)

    setup_cors(app, config)
    setup_security_headers(app)
    setup_tenant_context(app)
    setup_error_handlers(app)
    setup_request_logging(app)

    if not app.debug:
        warn_missing_settings(app)

    logger.info("✅ Security configuration complete")
