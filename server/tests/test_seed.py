"""Tests for the seed command."""

import json

import pytest

from tours_api.core.config import DEFAULT_SEED_DATA_PATH
from tours_api.core.database import build_engine, build_session_factory
from tours_api.seed import SeedConfig, load_tours, main, parse_args, run
from tours_api.services.tour_service import TourService

RECORDS = [
    {
        "name": "The Forest Hiker",
        "duration": 5,
        "maxGroupSize": 25,
        "difficulty": "easy",
        "price": 397,
        "summary": "Breathtaking hike through the Canadian Banff National Park",
        "imageCover": "tour-1-cover.jpg",
        "startDates": ["2026-04-25T09:00:00Z"],
    },
    {
        "name": "The Sea Explorer",
        "duration": 7,
        "maxGroupSize": 15,
        "difficulty": "medium",
        "price": 497,
        "summary": "Exploring the jaw-dropping US east coast",
        "imageCover": "tour-2-cover.jpg",
    },
    {
        "name": "The Snow Adventurer",
        "duration": 4,
        "maxGroupSize": 10,
        "difficulty": "difficult",
        "price": 997,
        "summary": "Exciting adventure in the snow with snowboarding and skiing",
        "imageCover": "tour-3-cover.jpg",
        "secretTour": True,
    },
]


@pytest.fixture
def seed_config(tmp_path):
    data_path = tmp_path / "tours.json"
    data_path.write_text(json.dumps(RECORDS), encoding="utf-8")
    return SeedConfig(database_url=f"sqlite+aiosqlite:///{tmp_path / 'seed.db'}", data_path=data_path)


async def stored_tours(config):
    engine = build_engine(config.database_url)
    try:
        async with build_session_factory(engine)() as session:
            return await TourService(session).list_tours(include_secret=True, sort="name")
    finally:
        await engine.dispose()


def test_load_tours_converts_to_model_values(seed_config):
    values = load_tours(seed_config.data_path)

    assert len(values) == 3
    assert values[0]["max_group_size"] == 25
    assert values[2]["secret_tour"] is True
    assert "price_discount" not in values[0]


def test_bundled_data_file_loads():
    values = load_tours(DEFAULT_SEED_DATA_PATH)

    assert len(values) == 5
    assert all(v["name"] for v in values)


@pytest.mark.asyncio
async def test_import_then_delete(seed_config):
    """Test importing the file stores every tour, then delete removes them all."""
    assert await run("import", seed_config) == 0

    tours = await stored_tours(seed_config)
    assert [t.slug for t in tours] == ["the-forest-hiker", "the-sea-explorer", "the-snow-adventurer"]
    assert all(t.ratings_average == 4.5 for t in tours)

    assert await run("delete", seed_config) == 0
    assert await stored_tours(seed_config) == []

    # Deleting an empty collection still succeeds
    assert await run("delete", seed_config) == 0


@pytest.mark.asyncio
async def test_import_twice_fails_without_partial_writes(seed_config):
    assert await run("import", seed_config) == 0
    assert await run("import", seed_config) == 1

    assert len(await stored_tours(seed_config)) == 3


@pytest.mark.asyncio
async def test_import_invalid_record_writes_nothing(seed_config):
    records = [RECORDS[0], {**RECORDS[1], "name": "Bad"}]
    seed_config.data_path.write_text(json.dumps(records), encoding="utf-8")

    assert await run("import", seed_config) == 1
    assert await stored_tours(seed_config) == []


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ['{"name": "not a list"}', "not json"])
async def test_import_bad_file(seed_config, content):
    seed_config.data_path.write_text(content, encoding="utf-8")

    assert await run("import", seed_config) == 1


@pytest.mark.asyncio
async def test_import_missing_file(seed_config, tmp_path):
    config = SeedConfig(database_url=seed_config.database_url, data_path=tmp_path / "missing.json")

    assert await run("import", config) == 1


def test_parse_args_modes(tmp_path):
    assert parse_args(["--import"]).mode == "import"
    assert parse_args(["--delete"]).mode == "delete"
    assert parse_args(["--import", "--file", str(tmp_path / "t.json")]).file == tmp_path / "t.json"


@pytest.mark.parametrize("argv", [[], ["--import", "--delete"], ["--purge"]])
def test_parse_args_requires_one_mode(argv):
    with pytest.raises(SystemExit) as exc_info:
        parse_args(argv)

    assert exc_info.value.code == 2


def test_main_delete_on_empty_database():
    assert main(["--delete"]) == 0
