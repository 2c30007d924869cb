"""
Steel Buckle - content API for the multilingual company site

Page consumers read the API through `steelbuckle.utils.content_client.ContentClient`
and pick read-only or editable access with
`steelbuckle.utils.content_source.select_content_source`.
"""
import os
from pathlib import Path

from flask import Flask, jsonify

from steelbuckle.extensions import db, login_manager


def _default_config(app):
    instance_path = Path(app.instance_path)
    production = os.environ.get("FLASK_ENV") == "production"
    secret_key = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-production")
    return {
        "SECRET_KEY": secret_key,
        "JWT_SECRET": os.environ.get("JWT_SECRET") or secret_key,
        "SQLALCHEMY_DATABASE_URI": os.environ.get("DATABASE_URL", f"sqlite:///{instance_path / 'steelbuckle.db'}"),
        "SQLALCHEMY_TRACK_MODIFICATIONS": False,
        "CLOUDINARY_CLOUD_NAME": os.environ.get("CLOUDINARY_CLOUD_NAME"),
        "CLOUDINARY_API_KEY": os.environ.get("CLOUDINARY_API_KEY"),
        "CLOUDINARY_API_SECRET": os.environ.get("CLOUDINARY_API_SECRET"),
        "MEDIA_FOLDER": os.environ.get("MEDIA_FOLDER", "media"),
        # Base URL for sitemap.xml and robots.txt
        "PUBLIC_BASE_URL": os.environ.get("PUBLIC_BASE_URL", "https://steelbuckle.ee"),
        "SESSION_TOKEN_TTL": int(os.environ.get("SESSION_TOKEN_TTL", 2 * 60 * 60)),
        "SESSION_COOKIE_MAX_AGE": int(os.environ.get("SESSION_COOKIE_MAX_AGE", 24 * 60 * 60)),
        "CSRF_TOKEN_TTL": int(os.environ.get("CSRF_TOKEN_TTL", 30 * 60)),
        "PROJECTS_QUERY_TIMEOUT": float(os.environ.get("PROJECTS_QUERY_TIMEOUT", 10)),
        "MAX_CONTENT_LENGTH": 20 * 1024 * 1024,  # 20MB max request size
        "MAX_UPLOAD_BYTES": 5 * 1024 * 1024,  # 5MB max image
        "ADMIN_USERNAME": os.environ.get("ADMIN_USERNAME"),
        "ADMIN_PASSWORD": os.environ.get("ADMIN_PASSWORD"),
        "ADMIN_PASSWORD_HASH": os.environ.get("ADMIN_PASSWORD_HASH"),
        "COOKIE_SECURE": production,
    }


def create_app(test_config=None):
    """Create and configure the Flask application"""
    app = Flask(__name__)

    # Ensure instance folder exists for the default SQLite database
    Path(app.instance_path).mkdir(parents=True, exist_ok=True)

    app.config.from_mapping(_default_config(app))
    if test_config:
        app.config.update(test_config)

    # Ensure Flask knows it's behind a proxy (client address and HTTPS detection)
    from werkzeug.middleware.proxy_fix import ProxyFix

    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1, x_prefix=1)

    db.init_app(app)
    login_manager.init_app(app)

    from steelbuckle.errors import register_error_handlers

    register_error_handlers(app)

    # Per-app runtime state
    from steelbuckle.utils.broadcast import ContentBus
    from steelbuckle.utils.login_security import create_rate_limiters
    from steelbuckle.utils.media_host import MediaHost
    from steelbuckle.utils.translation_store import TranslationStore, fetch_tree_from_db

    bus = ContentBus()
    translation_store = TranslationStore(fetch_tree_from_db)
    translation_store.subscribe_to(bus)
    app.extensions["content_bus"] = bus
    app.extensions["translation_store"] = translation_store
    app.extensions["rate_limiters"] = create_rate_limiters()
    app.extensions["media_host"] = MediaHost.from_config(app.config)

    # Register blueprints
    from steelbuckle.features.api.blueprint import bp as api_bp
    from steelbuckle.features.auth.blueprint import bp as auth_bp
    from steelbuckle.features.site.blueprint import bp as site_bp

    app.register_blueprint(auth_bp)  # /api/auth/
    app.register_blueprint(api_bp)  # /api/
    app.register_blueprint(site_bp)  # /sitemap.xml, /robots.txt

    from steelbuckle.models.user import User
    from steelbuckle.utils.session_tokens import SESSION_COOKIE_NAME, verify_token

    @login_manager.request_loader
    def load_user_from_cookie(request):
        """Load the user named by a valid session token cookie."""
        claims = verify_token(request.cookies.get(SESSION_COOKIE_NAME))
        if not claims:
            return None
        return User.get_by_id(claims.get("id"))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"success": False, "error": "Authentication required", "login_required": True}), 401

    from steelbuckle.cli import register_commands

    register_commands(app)

    with app.app_context():
        # Import every model so create_all sees all tables
        from steelbuckle.models import contact, media, project, seo, setting, translation  # noqa: F401

        db.create_all()
        User.ensure_bootstrap_admin(
            username=app.config.get("ADMIN_USERNAME"),
            password=app.config.get("ADMIN_PASSWORD"),
            password_hash=app.config.get("ADMIN_PASSWORD_HASH"),
        )

    return app
