"""Shared fixtures: each test gets its own SQLite file and app instance."""

import pytest
from fastapi.testclient import TestClient

from wl_app.core.config import Settings
from wl_app.main import create_app

ADMIN_TOKEN = "s3cret-token"


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "database_url": f"sqlite:///{tmp_path / 'waitlist.db'}",
        "admin_token": ADMIN_TOKEN,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c


@pytest.fixture
def admin_headers():
    return {"X-Admin-Token": ADMIN_TOKEN}
