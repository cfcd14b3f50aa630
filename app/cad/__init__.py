import logging
import os
from datetime import timedelta

from dotenv import load_dotenv
from flask import Flask

from app.cad.auth import bp as auth_bp, load_current_user
from app.cad.config import load_config
from app.cad.db import init_db, teardown_db_session
from app.cad.errors import register_error_handlers
from app.cad.modules.cad_settings.api import bp as cad_settings_bp
from app.cad.modules.citizens.api import bp as citizens_bp
from app.cad.modules.courthouse.api import bp as courthouse_bp
from app.cad.modules.values.api import bp as values_bp
from app.cad.modules.vehicles.api import bp as vehicles_bp
from app.cad.routes import bp as routes_bp
from app.cad.security import init_csrf

logger = logging.getLogger(__name__)


def _check_production_config(app: Flask) -> None:
    env = (app.config.get("ENV") or "").strip().lower()
    if env not in ("prod", "production"):
        return
    db_url = str(app.config.get("DATABASE_URL") or "").strip()
    if not db_url:
        raise RuntimeError("DATABASE_URL is required in production.")
    if db_url.startswith("sqlite"):
        raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")
    if str(app.config.get("SECRET_KEY") or "") in ("", "change-me"):
        raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")


def _check_storage_config(app: Flask) -> None:
    if app.config.get("STORAGE_BACKEND") != "s3":
        return
    missing = [
        key
        for key in ("S3_ENDPOINT", "S3_BUCKET", "S3_ACCESS_KEY_ID", "S3_SECRET_ACCESS_KEY")
        if not app.config.get(key)
    ]
    if missing:
        logger.error("STORAGE CONFIG ERROR: logo uploads will fail, missing S3 env vars: %s", ", ".join(missing))


def _dispose_engine_on_fork(app: Flask) -> None:
    # gunicorn forks workers after create_app(); pooled connections must not be shared
    if not hasattr(os, "register_at_fork"):
        return

    def _after_fork_child() -> None:
        engine = app.extensions.get("sqlalchemy_engine")
        if engine is not None:
            engine.dispose()
            logger.info("Disposed DB engine after fork (pid=%s)", os.getpid())

    os.register_at_fork(after_in_child=_after_fork_child)


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__)
    app.config.from_mapping(load_config())
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(hours=8)
    app.config["SESSION_REFRESH_EACH_REQUEST"] = True

    logging.basicConfig(
        level=getattr(logging, app.config["LOG_LEVEL"], logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    _check_production_config(app)
    init_db(app)
    _dispose_engine_on_fork(app)
    _check_storage_config(app)

    init_csrf(app)
    app.before_request(load_current_user)
    app.teardown_appcontext(teardown_db_session)

    app.register_blueprint(routes_bp)
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(courthouse_bp)
    app.register_blueprint(vehicles_bp)
    app.register_blueprint(citizens_bp)
    app.register_blueprint(cad_settings_bp, url_prefix="/admin")
    app.register_blueprint(values_bp, url_prefix="/admin")

    register_error_handlers(app)

    logger.info("create_app() complete (env=%s, storage=%s)", app.config["ENV"], app.config["STORAGE_BACKEND"])
    return app
