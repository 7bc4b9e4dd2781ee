# backend/merrily/__init__.py
import logging

from flask import Flask, request, jsonify

from .config import Config
from .extensions import db, migrate, platform
from .platform import PlatformError


def create_app(config_object=None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object or Config)

    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    platform.init_app(app)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.products import products_bp
    from .routes.categories import categories_bp
    from .routes.collections import collections_bp
    from .routes.sales import sales_bp
    from .routes.analytics import analytics_bp
    from .routes.finance import finance_bp
    from .routes.attendance import attendance_bp
    from .routes.posts import posts_bp
    from .routes.comments import comments_bp
    from .routes.likes import likes_bp
    from .routes.notifications import notifications_bp
    from .routes.push import push_bp
    from .routes.presets import presets_bp
    from .routes.site import site_bp
    from .routes.users import users_bp
    from .routes.signup import signup_bp
    from .routes.upload import upload_bp
    from .routes.logs import logs_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(categories_bp)
    app.register_blueprint(collections_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(analytics_bp)
    app.register_blueprint(finance_bp)
    app.register_blueprint(attendance_bp)
    app.register_blueprint(posts_bp)
    app.register_blueprint(comments_bp)
    app.register_blueprint(likes_bp)
    app.register_blueprint(notifications_bp)
    app.register_blueprint(push_bp)
    app.register_blueprint(presets_bp)
    app.register_blueprint(site_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(signup_bp)
    app.register_blueprint(upload_bp)
    app.register_blueprint(logs_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config.get("CORS_ORIGINS", set()):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    @app.errorhandler(404)
    def not_found(_e):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(_e):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(PlatformError)
    def platform_failure(e):
        app.logger.warning("Platform call failed: %s", e)
        return jsonify({"error": str(e)}), e.status_code or 502

    @app.errorhandler(500)
    def internal_error(_e):
        db.session.rollback()
        return jsonify({"error": "Internal server error"}), 500

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
