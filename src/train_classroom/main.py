from __future__ import annotations

import importlib

from dotenv import load_dotenv

from config import get_settings_module

from .common.logging import get_logger, setup_logging
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables

log = get_logger(__name__)


def create_container() -> Container:
    """Load settings for APP_ENV, configure logging and wire the services."""
    load_dotenv(override=False)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    setup_logging(
        json_output=bool(getattr(settings, "LOG_JSON", False)),
        log_level=str(getattr(settings, "LOG_LEVEL", "INFO")),
    )

    db_config = getattr(settings, "DB_CONFIG")
    log.info(
        "settings_loaded",
        settings=settings_module,
        db=f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config)
        log.info("schema_ready", tables=len(list_tables(db_config)))

    return build_container(db_config=db_config, settings=settings)
