"""
CLI helper to create the site API tables in the configured database.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sqlalchemy import inspect

from siteapi.config import get_settings
from siteapi.db import SqlDbClient

logger = logging.getLogger("init_db")


def main() -> int:
    parser = argparse.ArgumentParser(description="Create site API tables")
    parser.add_argument(
        "-u",
        "--database-url",
        type=str,
        default=None,
        help="Override DATABASE_URL",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    database_url = args.database_url or get_settings().database_url
    if not database_url:
        logger.error("DATABASE_URL is not set")
        return 1

    client = SqlDbClient(database_url, create_tables=True)
    tables = sorted(inspect(client.engine).get_table_names())
    logger.info("Tables ready: %s", ", ".join(tables))
    return 0


if __name__ == "__main__":
    sys.exit(main())
