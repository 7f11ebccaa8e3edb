# backend/oms/__init__.py
from flask import Flask, request

from .cache import TTLCache
from .config import Config
from .extensions import configure_sqlite, db, migrate
from . import log_sanitizer


def create_app(config_object=None, cache: TTLCache | None = None) -> Flask:
    """
    Application factory.

    config_object defaults to Config (environment driven); tests pass
    TestConfig. cache lets callers inject their own TTLCache instance.
    """
    config_object = config_object or Config

    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object)
    app.config["SQLALCHEMY_ENGINE_OPTIONS"] = config_object.engine_options()

    log_sanitizer.install(app.logger, app.config["LOG_LEVEL"])

    # Initialize extensions
    db.init_app(app)
    with app.app_context():
        configure_sqlite(db.engine)
    migrate.init_app(app, db)

    if cache is None:
        cache = TTLCache(
            max_entries=app.config["CACHE_MAX_ENTRIES"],
            default_ttl=app.config["IDENTITY_CACHE_TTL"],
        )
    app.extensions["oms_cache"] = cache

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.orders import orders_bp
    from .routes.employee import employee_bp
    from .routes.inventory import inventory_bp
    from .routes.invoices import invoices_bp
    from .routes.reports import reports_bp
    from .routes.users import users_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(employee_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(invoices_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(users_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin and origin in app.config["CORS_ALLOWED_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type, X-CSRF-Token"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    @app.after_request
    def add_security_headers(response):
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        if app.config.get("PRODUCTION"):
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        if request.path.startswith("/api"):
            response.headers["Cache-Control"] = "no-store"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
