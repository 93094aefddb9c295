"""Common test fixtures."""

import os
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from applytrack import config as config_module
from applytrack.clients.store import RemoteStore
from applytrack.config import ApplytrackConfig, ConfigManager
from applytrack.schemas.tree import ApplicationNode, FolderNode
from applytrack.services.explorer import ExplorerService
from factories import make_application, make_folder
from fake_backend import API_PREFIX, FakeBackend

BASE_URL = f"http://test{API_PREFIX}"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def config_home(tmp_path, monkeypatch) -> Path:
    # Patch HOME environment variable for the duration of the test
    monkeypatch.setenv("HOME", str(tmp_path))
    # On Windows, also set USERPROFILE
    if os.name == "nt":
        monkeypatch.setenv("USERPROFILE", str(tmp_path))
    monkeypatch.setenv("APPLYTRACK_CONFIG_DIR", str(tmp_path / ".applytrack"))
    return tmp_path


@pytest.fixture
def app_config(config_home) -> ApplytrackConfig:
    return ApplytrackConfig(env="test", api_url="http://test", log_to_file=False)


@pytest.fixture
def config_manager(app_config: ApplytrackConfig, config_home: Path) -> ConfigManager:
    # Invalidate config cache to ensure clean state for each test
    config_module._CONFIG_CACHE = None

    config_manager = ConfigManager()
    config_manager.save_config(app_config)
    yield config_manager
    config_module._CONFIG_CACHE = None


@pytest.fixture
def backend() -> FakeBackend:
    """Seeded in-memory backend."""
    return FakeBackend().seed()


@pytest_asyncio.fixture(scope="function")
async def http_client(backend: FakeBackend) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client routed to the fake backend."""
    async with AsyncClient(
        transport=ASGITransport(app=backend.app), base_url=BASE_URL
    ) as client:
        yield client


@pytest.fixture
def store(http_client: AsyncClient) -> RemoteStore:
    return RemoteStore(http_client)


@pytest.fixture
def explorer(store: RemoteStore) -> ExplorerService:
    return ExplorerService(store)


@pytest.fixture
def sample_forest() -> list[ApplicationNode]:
    """Acme (1) with Resumes(10) > Old(11) and Letters(12); Globex (2) with Offers(20)."""
    acme = ApplicationNode(
        application=make_application(1, "Acme"),
        loaded=True,
        children=[
            FolderNode(
                folder=make_folder(10, name="Resumes"),
                children=[FolderNode(folder=make_folder(11, name="Old", parent_id=10))],
            ),
            FolderNode(folder=make_folder(12, name="Letters")),
        ],
    )
    globex = ApplicationNode(
        application=make_application(2, "Globex"),
        loaded=True,
        children=[FolderNode(folder=make_folder(20, application_id=2, name="Offers"))],
    )
    return [acme, globex]
