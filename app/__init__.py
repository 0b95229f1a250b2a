from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException
from .extensions import db, migrate, jwt, celery
import logging
import os

# Setup basic logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s %(levelname)s: %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(config_name=None):
    """Create Flask application factory"""
    app = Flask(__name__)

    # Load configuration
    if config_name:
        from app.config import config
        app.config.from_object(config.get(config_name, config['default']))
    else:
        from app.config import get_config
        app.config.from_object(get_config())

    # Ensure production mode if FLASK_ENV is production
    if os.getenv('FLASK_ENV') == 'production':
        app.config['DEBUG'] = False
        app.config['TESTING'] = False

    if not app.config['DEBUG'] and not app.config['TESTING']:
        from app.config import DEFAULT_SECRET_KEY
        if app.config['SECRET_KEY'] == DEFAULT_SECRET_KEY:
            raise ValueError("SECRET_KEY must be set in production")

    logging.getLogger().setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Initialize extensions first (before error handlers)
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    # Initialize CORS
    from app.utils.cors import init_cors
    init_cors(app)

    # Initialize Celery
    celery.conf.update(
        broker_url=app.config['CELERY_BROKER_URL'],
        result_backend=app.config['CELERY_RESULT_BACKEND'],
        task_serializer=app.config['CELERY_TASK_SERIALIZER'],
        accept_content=app.config['CELERY_ACCEPT_CONTENT'],
        result_serializer=app.config['CELERY_RESULT_SERIALIZER'],
        timezone=app.config['CELERY_TIMEZONE'],
        enable_utc=app.config['CELERY_ENABLE_UTC'],
    )

    # Make celery tasks work with Flask app context
    class FlaskAppContextTask(celery.Task):
        """Make celery tasks work with Flask app context."""
        def __call__(self, *args, **kwargs):
            with app.app_context():
                return self.run(*args, **kwargs)

    celery.Task = FlaskAppContextTask

    # JWT errors use the same JSON shape as every other error
    from app.utils.errors import ServiceError, Unauthenticated, NotFound

    @jwt.unauthorized_loader
    def missing_token(reason):
        return Unauthenticated().to_response()

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return Unauthenticated('認証トークンが無効です').to_response()

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return Unauthenticated('認証トークンの有効期限が切れています').to_response()

    # Global error handlers
    @app.errorhandler(ServiceError)
    def handle_service_error(error):
        if error.status_code >= 500:
            logger.error(f"Service error on {request.path}: {error.message}")
        return error.to_response()

    @app.errorhandler(404)
    def not_found(error):
        return NotFound('エンドポイントが見つかりません').to_response()

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal Server Error: {error}", exc_info=True)
        return ServiceError().to_response()

    @app.errorhandler(Exception)
    def handle_exception(e):
        if isinstance(e, HTTPException):
            return jsonify({
                'success': False,
                'code': 'invalid-argument' if e.code < 500 else 'internal',
                'error': e.description,
            }), e.code
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        return ServiceError().to_response()

    # Setup logging
    if not app.debug and not app.testing:
        from logging.handlers import RotatingFileHandler

        log_file = app.config['LOG_FILE']
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10240000,
            backupCount=10
        )
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        logging.getLogger().addHandler(file_handler)
        app.logger.addHandler(file_handler)
        app.logger.setLevel(logging.INFO)
        app.logger.info('Application startup')

    # Security headers middleware
    @app.after_request
    def set_security_headers(response):
        """Add security headers to all responses"""
        if not app.debug:
            response.headers['X-Content-Type-Options'] = 'nosniff'
            response.headers['X-Frame-Options'] = 'DENY'
            response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
            # Only add HSTS if using HTTPS
            if request.is_secure:
                response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
        return response

    with app.app_context():
        from . import models  # noqa: F401  registers tables with SQLAlchemy
        from .events import init_report_events
        from .services.collaborators import init_collaborators

        init_collaborators(app)
        init_report_events(app)

        # Register blueprints
        from .routes import health_bp, reporting_bp, storage_bp
        app.register_blueprint(health_bp)  # Register health check first
        app.register_blueprint(reporting_bp)
        app.register_blueprint(storage_bp)

    return app
