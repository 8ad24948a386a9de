import os
from flask import Flask
from dotenv import load_dotenv

load_dotenv()


def create_app(config_name=None):
    flask_app = Flask(__name__)

    if config_name is None:
        config_name = os.environ.get("FLASK_ENV")
        if not config_name:
            # Managed platforms set PORT; never fall back to debug there
            if os.environ.get("PORT"):
                config_name = "production"
            else:
                config_name = "development"

    from catalog_admin.config import config_map

    config_cls = config_map.get(config_name, config_map["development"])
    flask_app.config.from_object(config_cls)

    if hasattr(config_cls, "init_app"):
        config_cls.init_app(flask_app)

    from catalog_admin.extensions import db, migrate

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)

    # Import models so Alembic sees them
    import catalog_admin.models  # noqa: F401

    from catalog_admin.blueprints.admin import admin_bp

    flask_app.register_blueprint(admin_bp, url_prefix="/admin")

    from catalog_admin.errors import register_error_handlers

    register_error_handlers(flask_app)

    from catalog_admin.cli import register_cli

    register_cli(flask_app)

    @flask_app.route("/health")
    def health():
        checks = {"status": "ok"}
        try:
            db.session.execute(db.text("SELECT 1"))
            checks["db"] = "ok"
        except Exception:
            flask_app.logger.exception("Health check DB probe failed")
            checks["db"] = "error"
            checks["status"] = "degraded"
        status_code = 200 if checks["status"] == "ok" else 503
        return checks, status_code

    return flask_app
