"""Shared fixtures: fresh SQLite database, controllable clock, HTTP client."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from trufo.config import Settings
from trufo.main import create_app
from trufo.models.stored_object import StoredObject
from trufo.services.access_service import AccessService
from trufo.services.object_repository import ObjectRepository
from trufo.utils import totp

ADMIN_TOKEN = "admin-secret"


class FakeClock:
    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'trufo-test.db'}",
        encryption_key="test-encryption-secret",
        admin_token=ADMIN_TOKEN,
    )


@pytest_asyncio.fixture
async def app(settings, clock):
    app = create_app(settings)
    app.state.clock = clock
    await app.state.database.init()
    yield app
    await app.state.database.dispose()


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def session(app):
    async with app.state.database.session_factory() as session:
        yield session


@pytest.fixture
def service(app, session, clock) -> AccessService:
    return AccessService(ObjectRepository(session), app.state.codec, clock=clock)


@pytest.fixture
def load_record(app):
    """Read a record straight from storage, bypassing the access engine."""

    async def _load(object_id: str) -> StoredObject | None:
        async with app.state.database.session_factory() as session:
            return await session.get(StoredObject, object_id)

    return _load


@pytest.fixture
def current_code(load_record, clock):
    async def _code(object_id: str, step_offset: int = 0) -> str:
        record = await load_record(object_id)
        return totp.hotp(record.totp_secret, totp.time_step(clock.now) + step_offset)

    return _code
