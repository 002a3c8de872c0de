from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from config import get_settings_module

from train_classroom.common.logging import get_logger, setup_logging
from train_classroom.database.bootstrap import apply_schema, list_tables

log = get_logger("scripts.init_db")


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    setup_logging(json_output=bool(getattr(settings, "LOG_JSON", False)), log_level=getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config)
    tables = list_tables(db_config)
    log.info(
        "database_initialized",
        db=f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
        tables=len(tables),
    )


if __name__ == "__main__":
    main()
