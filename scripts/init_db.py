from __future__ import annotations

import argparse
import importlib
import logging

from dotenv import load_dotenv

from attendance_hub.common.logging_utils import configure_logging
from attendance_hub.container import build_container
from attendance_hub.database.bootstrap import apply_schema, ensure_demo_profiles, list_tables
from attendance_hub.settings import get_settings_module

logger = logging.getLogger("attendance_hub.scripts.init_db")


def main() -> None:
    parser = argparse.ArgumentParser(description="Apply schema.sql to the configured MySQL database.")
    parser.add_argument("--seed", action="store_true", help="also create the demo HOC and student profiles")
    args = parser.parse_args()

    load_dotenv(override=False)
    configure_logging("INFO")
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config)
    tables = list_tables(db_config)
    logger.info(
        "Applied schema.sql -> %s@%s:%s/%s (tables=%d)",
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
        len(tables),
    )

    if args.seed:
        container = build_container(db_config=db_config, backend="mysql")
        ensure_demo_profiles(container.profiles_repo)


if __name__ == "__main__":
    main()
