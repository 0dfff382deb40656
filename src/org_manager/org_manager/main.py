from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.http import register_error_handlers
from .container import Container, build_container
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables

from .assets.controller import register as register_assets
from .attendance.controller import register as register_attendance
from .audit.controller import register as register_audit
from .employees.controller import register as register_employees
from .feedback.controller import register as register_feedback
from .leaves.controller import register as register_leaves
from .notifications.controller import register as register_notifications
from .settings.controller import register as register_settings
from .todos.controller import register as register_todos

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[3]


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["DEVICE_API_KEY"] = getattr(settings, "DEVICE_API_KEY", "")

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
            apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
            ensure_demo_users(db_config)
            logger.info("demo seed ready")

        container = build_container(
            db_config=db_config,
            asset_write_retries=int(getattr(settings, "ASSET_WRITE_RETRIES", 3)),
        )

    app.extensions["org_manager.container"] = container
    register_error_handlers(app)

    register_employees(app, container)
    register_assets(app, container)
    register_leaves(app, container)
    register_attendance(app, container)
    register_notifications(app, container)
    register_audit(app, container)
    register_todos(app, container)
    register_feedback(app, container)
    register_settings(app, container)

    return app
