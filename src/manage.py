"""Ordering service database management CLI.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables

Set PROTEAN_ENV=production to target the PostgreSQL database configured in
``ordering/domain.toml``; the default memory provider has nothing to create.
"""

import argparse
import sys

import structlog

logger = structlog.get_logger(__name__)


def setup_database():
    from ordering.domain import ordering
    from ordering.utils.db import setup_db

    ordering.init()
    setup_db(ordering)
    logger.info("database_schema_created", domain=ordering.name)


def drop_database():
    from ordering.domain import ordering
    from ordering.utils.db import drop_db

    ordering.init()
    drop_db(ordering)
    logger.info("database_schema_dropped", domain=ordering.name)


COMMANDS = {
    "setup-db": setup_database,
    "drop-db": drop_database,
}


def main(argv=None):
    parser = argparse.ArgumentParser(description="Ordering service database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args(argv)
    COMMANDS[args.command]()
    return 0


if __name__ == "__main__":
    sys.exit(main())
