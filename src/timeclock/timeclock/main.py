from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .core.exceptions import AuthorizationError, DomainError, NotFound, StateConflict, ValidationError
from .corrections.controller import register as register_corrections
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DBConfig

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFound, 404),
    (StateConflict, 409),
)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status = next((code for cls, code in _STATUS_BY_ERROR if isinstance(exc, cls)), 400)
        body = {"success": False, "error": type(exc).__name__, "message": str(exc)}
        if isinstance(exc, StateConflict):
            # The caller's view of today's status is stale; it should re-fetch.
            body["refresh"] = True
        return jsonify(body), status


def create_app(container: Container | None = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if container is None:
        if app.config["DEBUG"]:
            logger.info(f"settings={settings_module} db={DBConfig.from_mapping(db_config).describe()}")

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info(f"schema ready (tables={len(list_tables(db_config))})")

        container = build_container(db_config=db_config, settings=settings)

    app.extensions["timeclock"] = container

    _register_error_handlers(app)
    register_attendance(app, container)
    register_corrections(app, container)

    return app
