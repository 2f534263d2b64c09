"""
Shared pytest fixtures for the CloudShare backend test suite.

Each test gets its own SQLite database under ``tmp_path`` and an in-memory
object store, wired together through a real ``FileServices`` container.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from cloudshare.config import Settings
from cloudshare.main import create_app
from cloudshare.services.container import FileServices
from cloudshare.services.file_storage import MemoryObjectStore

OWNER = "user-1"
OTHER_USER = "user-2"


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway database."""
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'cloudshare-test.db'}",
        FILE_STORAGE_TYPE="memory",
        PUBLIC_BASE_URL="http://testserver",
        SECRET_KEY="test-secret",
        MAX_UPLOAD_BYTES=10 * 1024 * 1024,
        STORAGE_TIMEOUT_SECONDS=5.0,
    )


@pytest.fixture
def object_store() -> MemoryObjectStore:
    return MemoryObjectStore()


@pytest.fixture
async def services(settings, object_store):
    """A started service container; tables are created on start."""
    container = FileServices.build(settings, object_store=object_store)
    await container.start()
    yield container
    await container.close()


@pytest.fixture
async def client(settings, services):
    """HTTP client talking to the app in-process."""
    app = create_app(settings, services=services)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def auth_headers(services):
    """Build Authorization headers for a given user id."""
    def _headers(user_id: str = OWNER) -> dict:
        return {"Authorization": f"Bearer {services.identity.issue_token(user_id)}"}
    return _headers
