import sys
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

# Ensure the backend directory is importable so `app.*` modules resolve
_BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(_BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(_BACKEND_DIR))

from app.main import create_app  # noqa: E402
from db.session import get_db  # noqa: E402


@pytest.fixture()
def settings_override(monkeypatch):
    monkeypatch.setenv("DEBUG", "true")
    monkeypatch.setenv("POSTGRES_HOST", "localhost")
    monkeypatch.setenv("DB_ECHO", "false")
    yield


@pytest.fixture()
def app(settings_override) -> FastAPI:
    application = create_app()
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def async_client(app: FastAPI):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture()
def fake_db(app: FastAPI, mocker):
    """Replace the DB dependency with an AsyncMock session.

    Routers under test get their services patched, so the session is only
    passed through.
    """

    session = mocker.AsyncMock(name="db_session")
    session.add = mocker.MagicMock()

    async def _override_get_db():
        yield session

    app.dependency_overrides[get_db] = _override_get_db
    return session
