from datetime import datetime
from uuid import UUID

import pytest

from todo_api.db import SQLRepository
from todo_api.migrate import MigrationRunner
from todo_api.pool import create_pool, dispose_pool
from todo_api.repositories import InMemoryRepository
from todo_api.settings import Settings


def _make_settings(database_url: str, **overrides) -> Settings:
    values = {
        "database_url": database_url,
        "pool_size": 5,
        "max_overflow": 0,
        "pool_timeout": 5.0,
        "log_level": "INFO",
        "cors_allow_origins": ["*"],
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def make_settings():
    return _make_settings


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'todos.db'}"


@pytest.fixture
def pool(database_url):
    engine = create_pool(_make_settings(database_url))
    yield engine
    dispose_pool(engine)


@pytest.fixture
def migrated_pool(pool):
    MigrationRunner(pool).run()
    return pool


@pytest.fixture(params=["sql", "memory"])
def repository(request):
    if request.param == "memory":
        return InMemoryRepository()
    return SQLRepository(request.getfixturevalue("migrated_pool"))


@pytest.fixture
def seed_entities():
    return [
        {
            "id": UUID("cdce7fda-909e-41cb-8507-abceb316a5b4"),
            "title": "Test the microservice",
            "description": "We should test the get all method",
            "completed": True,
            "completed_at": datetime(2022, 9, 24, 10, 0, 0),
            "created_at": datetime(2022, 9, 23, 12, 26, 32),
        },
        {
            "id": UUID("120400b8-eee8-47cc-9e96-5bc0a3e2e874"),
            "title": "Use a mock repository",
            "description": "We should test that we can also use a mock for the same handler",
            "completed": True,
            "completed_at": datetime(2022, 9, 24, 11, 0, 0),
            "created_at": datetime(2022, 9, 23, 12, 30, 0),
        },
    ]
