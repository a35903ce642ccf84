from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .core.exceptions import (
    AlreadyClockedIn,
    AttendanceError,
    AuthorizationError,
    BreakAlreadyOpen,
    DomainError,
    InvalidState,
    NoOpenBreak,
    PersistenceFailure,
    SessionNotFound,
    ValidationError,
)
from .database.bootstrap import apply_schema, list_tables
from .reporting.controller import register as register_reporting

logger = logging.getLogger(__name__)

_STATUS_CODES = [
    (SessionNotFound, 404),
    (AlreadyClockedIn, 409),
    (BreakAlreadyOpen, 409),
    (NoOpenBreak, 409),
    (InvalidState, 409),
    (AuthorizationError, 403),
    (ValidationError, 400),
]

SETTINGS_KEYS = (
    "BREAK_LUNCH_LIMIT_MINUTES",
    "BREAK_OTHER_LIMIT_MINUTES",
    "BREAK_OTHER_WARNING_MINUTES",
    "BREAK_CLASSIFICATION",
    "REQUIRED_DAILY_HOURS",
    "LIVE_TICK_SECONDS",
)


def _status_for(err: DomainError) -> int:
    for kind, code in _STATUS_CODES:
        if isinstance(err, kind):
            return code
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(err: DomainError):
        body = {"success": False, "error": type(err).__name__, "message": str(err)}
        if isinstance(err, AttendanceError):
            body["session_id"] = err.session_id
            body["employee_id"] = err.employee_id
        return jsonify(body), _status_for(err)

    @app.errorhandler(PersistenceFailure)
    def handle_persistence_failure(err: PersistenceFailure):
        logger.error("Storage failure: %s", err)
        return jsonify({"success": False, "error": "PersistenceFailure", "message": str(err)}), 503


def register_all(app: Flask, container: Container) -> Flask:
    app.extensions["timekeeping"] = container
    register_error_handlers(app)
    register_attendance(app, container)
    register_reporting(app, container)
    return app


def create_app(container: Container | None = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[2] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            settings={key: getattr(settings, key) for key in SETTINGS_KEYS if hasattr(settings, key)},
        )

    return register_all(app, container)
