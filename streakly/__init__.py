"""Streakly application factory and bootstrap."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from flask import Flask
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import event
from sqlalchemy.engine import Engine
from werkzeug.exceptions import HTTPException

from streakly.config import DEFAULT_SECRET, config_by_name
from streakly.core.container import build_services
from streakly.core.errors import AuthError, DomainError, NotFoundError
from streakly.core.utils.validation import jsonable_errors
from streakly.extensions import db, init_extensions, jwt

logger = logging.getLogger(__name__)


def create_app(config_name: Optional[str] = None) -> Flask:
    """Create and configure the Streakly Flask application."""
    env_name = (config_name or os.environ.get("APP_ENV") or "development").lower()
    project_root = Path(__file__).resolve().parent.parent
    instance_root = project_root / "instance"

    app = Flask(__name__, instance_path=str(instance_root), instance_relative_config=True)
    config_cls = config_by_name.get(env_name, config_by_name["development"])
    app.config.from_object(config_cls)
    _configure_logging(app)
    _check_secrets(app)
    logger.debug("Loaded %s configuration", config_cls.__name__)

    # Normalize sqlite path to absolute to avoid "unable to open database file"
    db_uri = app.config.get("SQLALCHEMY_DATABASE_URI") or ""
    if db_uri.startswith("sqlite:///"):
        db_path = Path(db_uri.replace("sqlite:///", "", 1))
        if not db_path.is_absolute():
            db_path = project_root / db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)
        app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{db_path}"

    init_extensions(app)
    build_services(app)
    _register_blueprints(app)
    _register_error_handlers(app)
    _register_auth_handlers()

    @app.get("/health")
    def health():
        return {"ok": True}, 200

    # Register CLI commands
    from streakly.scripts.purge_tokens import register_commands

    register_commands(app)

    return app


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _configure_logging(app: Flask) -> None:
    level = getattr(logging, app.config.get("LOG_LEVEL", "INFO"), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    logging.getLogger("streakly").setLevel(level)
    app.logger.setLevel(level)


def _check_secrets(app: Flask) -> None:
    if app.config.get("ENV") != "production":
        return
    for key in ("SECRET_KEY", "JWT_SECRET_KEY", "JWT_REFRESH_SECRET_KEY"):
        value = app.config.get(key) or ""
        if not value or value.startswith(DEFAULT_SECRET):
            raise RuntimeError(f"{key} must be set in production")
    if app.config["JWT_SECRET_KEY"] == app.config["JWT_REFRESH_SECRET_KEY"]:
        raise RuntimeError("JWT_SECRET_KEY and JWT_REFRESH_SECRET_KEY must differ")


def _register_blueprints(app: Flask) -> None:
    """Lazy import and register all controllers."""
    from streakly.core.auth.controllers import auth_bp  # local import to avoid circulars
    from streakly.domains.habits.controllers.goal_api import goal_api_bp
    from streakly.domains.habits.controllers.habit_api import habit_api_bp
    from streakly.domains.habits.controllers.tracking_api import tracking_api_bp

    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(habit_api_bp, url_prefix="/api/habits")
    app.register_blueprint(tracking_api_bp, url_prefix="/api/habits")
    app.register_blueprint(goal_api_bp, url_prefix="/api/habits")


def _unauthorized():
    # Every auth failure gets the same answer.
    return {"ok": False, "error": "unauthorized", "message": "Invalid credentials or token"}, 401


def _register_auth_handlers() -> None:
    """Route Flask-JWT-Extended failures through the same 401 envelope."""

    @jwt.unauthorized_loader
    def _missing_token(reason: str):
        return _unauthorized()

    @jwt.invalid_token_loader
    def _invalid_token(reason: str):
        return _unauthorized()

    @jwt.expired_token_loader
    def _expired_token(jwt_header: dict, jwt_payload: dict):
        return _unauthorized()


def _register_error_handlers(app: Flask) -> None:
    """JSON error responses."""

    @app.errorhandler(DomainError)
    def _domain_error(exc: DomainError):
        if isinstance(exc, AuthError):
            return _unauthorized()
        status = 404 if isinstance(exc, NotFoundError) else 400
        return {"ok": False, "error": exc.code, "message": exc.message}, status

    @app.errorhandler(SchemaValidationError)
    def _schema_error(exc: SchemaValidationError):
        return {"ok": False, "error": "validation_error", "details": jsonable_errors(exc)}, 400

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return {"ok": False, "error": exc.description}, exc.code

    @app.errorhandler(Exception)
    def _generic_error(exc: Exception):
        db.session.rollback()
        app.logger.exception("Unhandled error: %s", exc)
        # In debug/testing, surface the exception message to speed up diagnosis
        if app.debug or app.testing:
            return {"ok": False, "error": "unexpected_error", "message": str(exc)}, 500
        return {"ok": False, "error": "unexpected_error"}, 500
