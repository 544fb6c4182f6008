"""Create the condition tables.

Usage:
    python -m condition_records.scripts.init_db
    python -m condition_records.scripts.init_db --database-url sqlite:///conditions.db
    python -m condition_records.scripts.init_db --drop

For local development and testing. Production databases are managed
with the Alembic migrations under alembic/versions.
"""

import argparse
import logging

from sqlalchemy import inspect

from condition_records.core.config import settings
from condition_records.core.database import close_db, configure_engine, drop_db, get_engine, init_db

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Create the condition tables")
    parser.add_argument(
        "--database-url",
        default=None,
        help=f"Database URL (default: DATABASE_URL setting, {settings.database_url})",
    )
    parser.add_argument(
        "--drop",
        action="store_true",
        help="Drop existing tables before creating them",
    )
    return parser.parse_args(argv)


def initialize(database_url: str | None = None, drop: bool = False) -> list[str]:
    """Create the tables, optionally dropping them first.

    Returns:
        Names of the tables present after initialisation.
    """
    if database_url:
        configure_engine(database_url, echo=settings.debug)

    try:
        if drop:
            logger.info("Dropping existing tables")
            drop_db()
        init_db()
        tables = sorted(inspect(get_engine()).get_table_names())
        logger.info(f"Database ready with tables: {', '.join(tables)}")
        return tables
    finally:
        close_db()


def main(argv: list[str] | None = None) -> None:
    """Entry point for running the init script."""
    args = parse_args(argv)
    logging.basicConfig(level=settings.log_level)
    initialize(database_url=args.database_url, drop=args.drop)


if __name__ == "__main__":
    main()
