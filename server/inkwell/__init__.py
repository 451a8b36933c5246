# server/inkwell/__init__.py

import logging
import time
import uuid
from datetime import datetime

from flask import Flask, g, request, make_response
from flask_cors import CORS
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from inkwell.config import get_config
from inkwell.errors import ApiError
from inkwell.extensions import db, migrate, limiter
from inkwell.responses import ApiResponse
from inkwell.store import ContentStore
from inkwell.services import (
    ArticleService,
    CategoryService,
    CommentService,
    EngagementService,
    MediaService,
    ProjectService,
    RedisService,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

SERVICE_NAME = "inkwell-api"
SERVICE_VERSION = "2.0.0"

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
]


def create_app(config=None, media=None, cache=None):
    """Create and configure the Flask application"""
    app = Flask(__name__)
    app.config.from_object(get_config(config))
    app.started_at = time.time()

    # Initialize extensions
    initialize_extensions(app)

    # Build the shared clients handed to every service
    initialize_services(app, media=media, cache=cache)

    # Verify the store before serving anything
    with app.app_context():
        initialize_database(app)

    # Register middleware
    register_middleware(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Register root endpoints
    register_root_endpoints(app)

    logger.info(f"Application initialized in {app.config.get('FLASK_ENV', 'production')} mode")

    return app


def initialize_extensions(app):
    """Initialize Flask extensions"""
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)

    cors_origins = DEFAULT_CORS_ORIGINS + list(app.config.get("CORS_ORIGINS") or [])

    # Remove duplicates and None values
    cors_origins = list(filter(None, list(dict.fromkeys(cors_origins))))
    cors_origins.append(r"https://.*\.vercel\.app")

    CORS(app,
         resources={r"/*": {"origins": cors_origins}},
         supports_credentials=True,
         allow_headers=['Content-Type', 'Authorization', 'X-Requested-With', 'X-Request-ID'],
         methods=['GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS'],
         expose_headers=['Content-Type', 'X-Request-ID'],
         max_age=3600)

    logger.info(f"CORS initialized with origins: {cors_origins}")


def initialize_services(app, media=None, cache=None):
    """Construct the store, media and cache clients once and wire the services"""
    config = app.config

    app.api_response = ApiResponse()
    app.store = ContentStore(db)
    app.media = media or MediaService.from_config(config)
    app.cache = cache or RedisService(config.get("REDIS_URL"))

    app.category_service = CategoryService(
        app.store,
        cache=app.cache,
        cache_ttl=config.get("CACHE_TTL_CATEGORIES", 300),
    )
    app.article_service = ArticleService(
        app.store,
        app.media,
        app.category_service,
        max_image_size=config.get("MAX_IMAGE_SIZE", 5 * 1024 * 1024),
    )
    app.engagement_service = EngagementService(
        app.store,
        cache=app.cache,
        require_identity=config.get("REQUIRE_ENGAGEMENT_IDENTITY", False),
        most_viewed_ttl=config.get("CACHE_TTL_MOST_VIEWED", 60),
    )
    app.comment_service = CommentService(app.store)
    app.project_service = ProjectService(app.store)

    logger.info(f"Media storage: {'configured' if app.media.configured else 'not configured'}")
    logger.info(f"Redis cache: {'connected' if app.cache.configured else 'not configured'}")


def initialize_database(app):
    """Check connectivity and create missing tables; a dead store stops startup"""
    from inkwell import models  # noqa: F401  registers the tables

    try:
        app.store.ping()
        logger.info("Database connection successful")
    except SQLAlchemyError as conn_error:
        logger.critical(f"Database connection failed: {conn_error}")
        raise

    db.create_all()
    logger.info("Database tables created/verified")


def register_middleware(app):
    """Register application middleware"""

    @app.before_request
    def before_request():
        """Assign a request ID, answer preflight requests and log in development"""
        g.request_id = request.headers.get('X-Request-ID', str(uuid.uuid4()))

        if request.method == 'OPTIONS':
            return make_response()

        if app.config.get('FLASK_ENV') == 'development':
            logger.debug(f"{request.method} {request.path} from {request.remote_addr}")

    @app.after_request
    def after_request(response):
        """Add security headers to all responses"""
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'

        # Only add HSTS in production with HTTPS
        if app.config.get('FLASK_ENV') == 'production' and request.is_secure:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        request_id = getattr(g, 'request_id', None)
        if request_id:
            response.headers['X-Request-ID'] = request_id

        return response

    @app.teardown_appcontext
    def shutdown_session(exception=None):
        if exception is not None:
            db.session.rollback()


def register_blueprints(app):
    """Register all application blueprints"""
    from inkwell.routes import (
        articles_bp,
        categories_bp,
        comments_bp,
        engagement_bp,
        projects_bp,
    )

    app.register_blueprint(categories_bp, url_prefix='/api/categories')
    app.register_blueprint(articles_bp, url_prefix='/api/articles')
    app.register_blueprint(engagement_bp, url_prefix='/api/articles')
    app.register_blueprint(comments_bp, url_prefix='/api')
    app.register_blueprint(projects_bp, url_prefix='/api/projects')

    logger.info("Blueprints registered under /api")


def register_error_handlers(app):
    """Register error handlers for the application"""

    def api_response():
        return app.api_response

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        if error.status_code >= 500:
            logger.error(f"{type(error).__name__}: {error.message} {error.details or ''}")
        else:
            logger.info(f"{request.method} {request.path} -> {error.status_code} {error.code}: {error.message}")

        return api_response().error(error.message, error.status_code, error.code, error.details)

    @app.errorhandler(400)
    def bad_request(error):
        logger.warning(f"Bad request: {error}")
        message = error.description if hasattr(error, 'description') else 'Invalid request'
        return api_response().error(message, 400)

    @app.errorhandler(404)
    def not_found(error):
        return api_response().error('Route not found', 404, details={'path': request.path})

    @app.errorhandler(405)
    def method_not_allowed(error):
        return api_response().error(f'The {request.method} method is not allowed for this endpoint', 405)

    @app.errorhandler(413)
    def payload_too_large(error):
        limit = app.config.get('MAX_CONTENT_LENGTH')
        return api_response().error('Request body is too large', 413, details={'max_bytes': limit})

    @app.errorhandler(429)
    def rate_limit_exceeded(error):
        return api_response().error('Rate limit exceeded. Please try again later', 429)

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal server error: {error}", exc_info=True)
        return api_response().error('An unexpected error occurred. Please try again later.', 500)

    @app.errorhandler(Exception)
    def unhandled_exception(error):
        if isinstance(error, HTTPException):
            return api_response().error(error.description or error.name, error.code or 500)

        logger.error(f"Unhandled exception: {error}", exc_info=True)

        # Don't expose internal errors in production
        if app.config.get('FLASK_ENV') == 'production':
            return api_response().error('Something went wrong', 500)

        return api_response().error(str(error) or 'Something went wrong', 500, details={
            'type': type(error).__name__
        })


def register_root_endpoints(app):
    """Register root-level endpoints"""

    def database_check() -> dict:
        try:
            start = time.time()
            app.store.ping()
            return {
                'status': 'healthy',
                'response_time_ms': round((time.time() - start) * 1000, 2)
            }
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Database health check failed: {e}")
            return {'status': 'unhealthy', 'error': str(e)}

    @app.route('/')
    def index():
        """Root endpoint - API information"""
        return app.api_response.success(data={
            'service': SERVICE_NAME,
            'version': SERVICE_VERSION,
            'status': 'running',
            'timestamp': datetime.utcnow().isoformat() + 'Z',
            'environment': app.config.get('FLASK_ENV', 'production'),
            'endpoints': {
                'health': '/health',
                'ready': '/ready',
                'categories': '/api/categories',
                'articles': '/api/articles',
                'comments': '/api/articles/:id/comments',
                'projects': '/api/projects'
            }
        })

    @app.route('/health')
    def health_check():
        """Health check endpoint for monitoring"""
        checks = {
            'database': database_check(),
            'redis': app.cache.health(),
            'media': app.media.health(),
        }

        degraded = checks['database']['status'] != 'healthy' or checks['redis']['status'] == 'unhealthy'

        body = {
            'status': 'degraded' if degraded else 'healthy',
            'service': SERVICE_NAME,
            'version': SERVICE_VERSION,
            'timestamp': datetime.utcnow().isoformat() + 'Z',
            'uptime_seconds': round(time.time() - app.started_at, 1),
            'checks': checks
        }

        if degraded:
            return app.api_response.error('Service is degraded', 503, 'DEGRADED', details=body)

        return app.api_response.success(data=body, message='Server is healthy')

    @app.route('/ready')
    def readiness_check():
        """Readiness check for deployment platforms (K8s, etc)"""
        is_ready = database_check()['status'] == 'healthy'

        body = {
            'ready': is_ready,
            'service': SERVICE_NAME,
            'timestamp': datetime.utcnow().isoformat() + 'Z'
        }

        if not is_ready:
            return app.api_response.error('Service is not ready', 503, 'NOT_READY', details=body)

        return app.api_response.success(data=body)
