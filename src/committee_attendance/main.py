from __future__ import annotations

import importlib
import logging
import os
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from .app_logger import setup_logging
from .attendance.controller import register as register_attendance
from .committees.controller import register as register_committees
from .common.http import register_error_handlers
from .config import get_settings_module
from .container import Container, build_container
from .core.constants import TOKEN_TTL_DAYS
from .database.bootstrap import apply_schema, ensure_demo_users, list_tables
from .meetings.controller import register as register_meetings
from .reports.controller import register as register_reports
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(*, container: Optional[Container] = None, settings_module: Optional[str] = None) -> Flask:
    """Application factory. Pass `container` to run against injected repositories."""
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

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
            apply_schema(db_config)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_users(db_config)

        container = build_container(
            db_config=db_config,
            jwt_secret=getattr(settings, "JWT_SECRET", app.secret_key),
            token_ttl_days=int(getattr(settings, "TOKEN_TTL_DAYS", TOKEN_TTL_DAYS)),
        )

    register_error_handlers(app)

    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "OK", "message": "Committee Attendance API is running"})

    register_users(app, container)
    register_committees(app, container)
    register_meetings(app, container)
    register_attendance(app, container)
    register_reports(app, container)

    return app


def run() -> None:
    app = create_app()
    app.run(host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "5000")), threaded=True)


if __name__ == "__main__":
    run()
