"""Shared test fixtures."""

import base64
import json
import time
import uuid

import pytest
from httpx import ASGITransport, AsyncClient

from usersync.config import Settings
from usersync.db.engine import create_db_engine, create_session_factory, create_tables
from usersync.webhooks.verifier import sign_payload

TEST_SECRET = "whsec_" + base64.b64encode(b"usersync-test-signing-key-32byte").decode("ascii")


class RecordingGateway:
    """In-memory SyncGateway that records every command it receives."""

    def __init__(self, fail_with: Exception | None = None):
        self.calls: list[tuple[str, object]] = []
        self.fail_with = fail_with

    async def _record(self, op: str, command) -> bool:
        self.calls.append((op, command))
        if self.fail_with is not None:
            raise self.fail_with
        return True

    async def create_or_sync_user(self, command) -> None:
        await self._record("create_or_sync_user", command)

    async def patch_user(self, command) -> bool:
        return await self._record("patch_user", command)

    async def delete_user(self, command) -> bool:
        return await self._record("delete_user", command)


@pytest.fixture
def gateway():
    return RecordingGateway()


@pytest.fixture
def sign():
    """Return a helper that serializes a payload and builds signed svix headers."""

    def _sign(payload, secret: str = TEST_SECRET, msg_id: str | None = None, timestamp: int | None = None):
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
        msg_id = msg_id or f"msg_{uuid.uuid4().hex[:20]}"
        ts = str(timestamp if timestamp is not None else int(time.time()))
        headers = {
            "svix-id": msg_id,
            "svix-timestamp": ts,
            "svix-signature": sign_payload(secret, msg_id, ts, body),
            "content-type": "application/json",
        }
        return body, headers

    return _sign


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine for testing."""
    engine = create_db_engine("sqlite+aiosqlite:///")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Create a test database session."""
    async with create_session_factory(db_engine)() as session:
        yield session


@pytest.fixture
def test_settings():
    return Settings(webhook_secret=TEST_SECRET, json_logs=False, local_mode=False)


@pytest.fixture
def app(db_engine, test_settings):
    """Create a test application instance with in-memory DB."""
    from usersync.main import create_app

    _app = create_app(test_settings)
    _app.state.db_engine = db_engine
    _app.state.db_session_factory = create_session_factory(db_engine)
    return _app


@pytest.fixture
async def client(app):
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
