"""Shared fixtures: bundled metadata, a per-test SQLite store and an API client."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from mastercrud.api.app import create_app
from mastercrud.hooks import HookRegistry, HookService, register_builtin_hooks
from mastercrud.metadata.loader import MetadataLoader
from mastercrud.persistence import DatabaseConfig
from mastercrud.persistence.sqlite import SQLiteAdapter
from mastercrud.services.crud import EntityService

METADATA_PATH = Path(__file__).resolve().parents[2] / "metadata"


@pytest.fixture
def metadata_path() -> Path:
    return METADATA_PATH


@pytest.fixture
def registry():
    return MetadataLoader(METADATA_PATH).load_all()


@pytest.fixture
def hook_service(registry):
    hooks = HookRegistry()
    register_builtin_hooks(hooks)
    return HookService.build(registry, hooks)


@pytest.fixture
def sqlite_adapter(tmp_path, registry):
    """A connected SQLite adapter with every bundled table created."""
    adapter = SQLiteAdapter(tmp_path / "test.db")
    adapter.connect()
    for entity in registry:
        adapter.initialize_entity(entity)
    yield adapter
    adapter.close()


@pytest.fixture
def service(sqlite_adapter, hook_service):
    return EntityService(sqlite_adapter, hook_service)


@pytest.fixture
def client(tmp_path):
    """API client backed by a fresh per-test SQLite database."""
    app = create_app(
        metadata_path=METADATA_PATH,
        db_config=DatabaseConfig(url=f"sqlite:///{tmp_path / 'api.db'}"),
    )
    with TestClient(app) as client:
        yield client


def create_customer(client, kode="C1", nama="Alice", **extra):
    """Helper to create a customer and return the response body."""
    response = client.post("/customer", json={"kode": kode, "nama": nama, **extra})
    assert response.status_code == 201, response.text
    return response.json()
