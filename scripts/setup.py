#!/usr/bin/env python3
"""Setup script for the tours API: migrate the database, then load the dev tours."""

import asyncio
import logging
from pathlib import Path

from alembic import command
from alembic.config import Config

from tours_api.core.config import settings
from tours_api.seed import SeedConfig, run

server_dir = Path(__file__).parent.parent / "server"

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def setup_database() -> None:
    """
    Bring the database schema up to the latest migration.

    Alembic runs its own event loop, so this must be called outside one.
    """
    logger.info("Running database migrations...")
    alembic_cfg = Config(str(server_dir / "db" / "alembic.ini"))
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed")


def main() -> int:
    """Main setup function."""
    logger.info("Starting tours API setup...")

    setup_database()

    exit_code = asyncio.run(run("import", SeedConfig.from_settings(settings)))
    if exit_code:
        logger.error("Loading sample tours failed")
        return exit_code

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: cd server && uvicorn tours_api.main:app --reload")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
