from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config
from .errors import register_error_handlers
from models import storage  # DBStorage singleton (scoped_session)
from utils.discovery import DiscoveryGate
from utils.rate_limit import RateLimiter, RateLimitStore
from utils.sessions import SessionTracker
from utils.tokens import TokenService

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0.0",
    "info": {
        "title": "Authentication Discovery API",
        "version": "1.0.0",
        "description": "Token-based authentication with session tracking, rate limiting "
                       "and a three-stage discovery challenge.",
    },
    "basePath": "/",
    "schemes": ["http"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}

CHALLENGE = "Can you discover the secret key? Start with /api/v1/users/admin-panel"


def create_app(config_name: str | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    Core components (token service, session tracker, rate limiter and
    discovery gate) are built from config and registered in app.extensions.
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))
    config = app.config

    # Cross-Origin Resource Sharing: cookies only travel to explicitly listed origins
    origins = config.get("CORS_ORIGINS", "*")
    if origins != "*":
        origins = [o.strip() for o in origins.split(",") if o.strip()]
    CORS(app, resources={r"/*": {"origins": origins}}, supports_credentials=origins != "*")

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    app.extensions["token_service"] = TokenService.from_config(config)
    app.extensions["session_tracker"] = SessionTracker(max_age=config["SESSION_MAX_AGE"])
    app.extensions["rate_limiter"] = RateLimiter(
        RateLimitStore(),
        limit=config["RATE_LIMIT_MAX_REQUESTS"],
        window=config["RATE_LIMIT_WINDOW"],
    )
    app.extensions["discovery_gate"] = DiscoveryGate.from_config(config)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .users import bp as users_bp
    from .discovery import bp as discovery_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp, url_prefix="/api/v1/users")
    app.register_blueprint(users_bp, url_prefix="/api/v1/users")
    app.register_blueprint(discovery_bp, url_prefix="/api/v1/users")

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        # This calls scoped_session.remove(), preventing connection leaks
        storage.close()

    @app.route("/")
    @app.route("/api")
    def root():
        return {
            "message": "Authentication Discovery System API",
            "version": "1.0.0",
            "endpoints": {
                "health": "/health",
                "auth": "/api/v1/users",
                "docs": "/apidocs/",
            },
            "challenge": CHALLENGE,
        }, 200

    return app
