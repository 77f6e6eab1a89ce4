"""Storefront database management CLI.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys

import structlog

logger = structlog.get_logger(__name__)


def setup_database():
    from storefront.domain import storefront
    from storefront.utils.db import setup_db

    storefront.init()
    setup_db(storefront)
    logger.info("Storefront schema ready")


def drop_database():
    from storefront.domain import storefront
    from storefront.utils.db import drop_db

    storefront.init()
    drop_db(storefront)
    logger.info("Storefront schema dropped")


def main(argv=None):
    from storefront.utils.logging import configure_logging

    parser = argparse.ArgumentParser(description="Storefront database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args(argv)
    configure_logging()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    return 0


if __name__ == "__main__":
    sys.exit(main())
