"""
Load the development tour data into the database, or remove all tours.

Usage::

    python -m tours_api.seed --import [--file PATH]
    python -m tours_api.seed --delete
"""

import argparse
import asyncio
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from .core.config import Settings, settings
from .core.database import build_engine, build_session_factory, init_db
from .core.observability import setup_structured_logging
from .schemas.tour import TourWrite
from .services.tour_service import TourService


@dataclass(frozen=True)
class SeedConfig:
    """Everything a seed run needs, resolved once at process start."""

    database_url: str
    data_path: Path

    @classmethod
    def from_settings(cls, app_settings: Settings, data_path: Optional[Path] = None) -> "SeedConfig":
        return cls(
            database_url=app_settings.resolved_database_url,
            data_path=data_path or app_settings.seed_data_path,
        )


def load_tours(path: Path) -> list[dict[str, Any]]:
    """
    Read a JSON array of tours and convert each to model values.

    Raises:
        ValueError: If the document is not an array
        pydantic.ValidationError: If a record has a wrongly typed field
    """
    with path.open(encoding="utf-8") as fh:
        document = json.load(fh)
    if not isinstance(document, list):
        raise ValueError(f"{path} must contain a JSON array of tours")
    return [TourWrite.model_validate(record).to_model_values() for record in document]


async def import_data(config: SeedConfig, session: AsyncSession) -> int:
    tours = await TourService(session).import_tours(load_tours(config.data_path))
    return len(tours)


async def delete_data(config: SeedConfig, session: AsyncSession) -> int:
    return await TourService(session).delete_all_tours()


SeedOperation = Callable[[SeedConfig, AsyncSession], Awaitable[int]]

COMMANDS: dict[str, tuple[SeedOperation, str, str]] = {
    "import": (import_data, "Data successfully loaded", "Error loading data"),
    "delete": (delete_data, "Data successfully deleted", "Error deleting data"),
}


async def run(mode: str, config: SeedConfig) -> int:
    """
    Execute one seed operation.

    Returns:
        Process exit code: 0 on success, 1 on failure
    """
    log = structlog.get_logger(__name__)
    operation, success_message, failure_message = COMMANDS[mode]

    engine = build_engine(config.database_url)
    try:
        await init_db(engine)
        async with build_session_factory(engine)() as session:
            count = await operation(config, session)
        log.info(success_message, mode=mode, count=count)
        return 0
    except Exception as e:
        log.error(failure_message, mode=mode, error=str(e))
        return 1
    finally:
        await engine.dispose()


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="tours_api.seed", description=__doc__.strip().splitlines()[0])
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--import", dest="mode", action="store_const", const="import", help="insert the tours file")
    mode.add_argument("--delete", dest="mode", action="store_const", const="delete", help="delete every tour")
    parser.add_argument("--file", type=Path, default=None, help="tours JSON file (default: SEED_DATA_PATH)")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    setup_structured_logging()
    config = SeedConfig.from_settings(settings, args.file)
    return asyncio.run(run(args.mode, config))


if __name__ == "__main__":
    sys.exit(main())
