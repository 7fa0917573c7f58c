"""Initialize the Flask app and its extensions."""

import os

from flask import Flask
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from .auth.policies import check_route_policies
from .auth.tokens import TokenService
from .store import init_store


def _split_origins(value):
    """Comma separated origins; unset allows any origin."""
    if not value:
        return "*"
    return [origin.strip() for origin in value.split(",") if origin.strip()]


def create_app(test_config=None, db=None):
    """Create and configure an instance of the Flask application.

    ``db`` is an already built Firestore client; tests pass a ``MockFirestore``.
    """
    app = Flask(__name__, static_folder=None)

    # Load configuration
    app.config.from_mapping(
        SECRET_KEY=os.environ.get("SECRET_KEY") or "dev",
        JWT_SECRET=os.environ.get("JWT_SECRET") or "dev-jwt-secret",
        JWT_ALGORITHM=os.environ.get("JWT_ALGORITHM") or "HS256",
        JWT_EXPIRES_IN=int(os.environ.get("JWT_EXPIRES_IN") or 3600),
        TOKEN_HEADER=os.environ.get("TOKEN_HEADER") or "token",
        LOG_LEVEL=os.environ.get("LOG_LEVEL") or "INFO",
        POPULAR_LIMIT=int(os.environ.get("POPULAR_LIMIT") or 5),
        CORS_ORIGINS=_split_origins(os.environ.get("CORS_ORIGINS")),
    )

    if test_config:
        app.config.update(test_config)

    # Service loggers are children of app.logger ("contestbeaters").
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Initialize extensions
    CORS(app, origins=app.config["CORS_ORIGINS"])
    TokenService.from_config(app)
    init_store(app, db)

    # Register blueprints
    from . import main as main_bp

    app.register_blueprint(main_bp.bp)

    from . import auth as auth_bp

    app.register_blueprint(auth_bp.bp)

    from . import contest as contest_bp

    app.register_blueprint(contest_bp.bp)

    from . import registration as registration_bp

    app.register_blueprint(registration_bp.bp)

    from . import user as user_bp

    app.register_blueprint(user_bp.bp)

    from . import error_handlers

    app.register_blueprint(error_handlers.error_handlers_bp)

    check_route_policies(app)

    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    return app
