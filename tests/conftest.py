import base64
import os
import tempfile
from pathlib import Path

# Settings are read at import time; point them at throwaway values before importing the app
_TMP_DIR = Path(tempfile.mkdtemp(prefix="netwatch-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{(_TMP_DIR / 'netwatch.db').as_posix()}"
os.environ["ENCRYPTION_KEY"] = base64.urlsafe_b64encode(b"netwatch-tests-encryption-key-32").decode()
os.environ["GATEWAY_BACKEND"] = "mock"
os.environ["EMBEDDED_POLLER"] = "false"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from netwatch_manager import crud, schemas
from netwatch_manager.db.session import get_db, init_db
from netwatch_manager.main import app
from netwatch_manager.services.netwatch import RemoteDeviceGateway, get_gateway_factory
from netwatch_manager.services.netwatch.exceptions import GatewayAPIError


class FakeRouter:
    """Scripted router shared by every FakeGateway it builds; records sessions and queries."""

    def __init__(self, entries=None):
        self.entries = []
        for entry in entries or []:
            self.add(entry)
        self.connect_error = None
        self.query_error = None
        self.close_error = None
        self.connect_calls = 0
        self.close_calls = 0
        self.queries = []
        self.credentials = []

    def add(self, params):
        entry = {".id": f"*{len(self.entries) + 1}", "status": "unknown"}
        entry.update(params)
        self.entries.append(entry)
        return dict(entry)

    def builder(self, host, username, password, port):
        self.credentials.append((host, username, password, port))
        return FakeGateway(host, username, password, port, router=self)


class FakeGateway(RemoteDeviceGateway):
    def __init__(self, hostname, username, password, port, router: FakeRouter):
        super().__init__(hostname, username, password, port)
        self.router = router

    def connect(self):
        self.router.connect_calls += 1
        if self.router.connect_error:
            raise self.router.connect_error
        self._connected = True

    def query(self, command, params=None):
        params = dict(params or {})
        self.router.queries.append((command, params))
        if self.router.query_error:
            raise self.router.query_error
        if command == "/tool/netwatch/print":
            return [dict(e) for e in self.router.entries
                    if all(e.get(k) == v for k, v in params.items())]
        if command == "/tool/netwatch/add":
            return [self.router.add(params)]
        if command == "/tool/netwatch/set":
            entry_id = params.pop(".id")
            for entry in self.router.entries:
                if entry[".id"] == entry_id:
                    entry.update(params)
                    return []
            raise GatewayAPIError(f"no such item ({entry_id})")
        if command == "/tool/netwatch/remove":
            self.router.entries = [e for e in self.router.entries if e[".id"] != params[".id"]]
            return []
        if command == "/system/identity/print":
            return [{"name": "core-router"}]
        if command == "/system/resource/print":
            return [{"version": "7.14.2 (stable)"}]
        raise GatewayAPIError(f"unexpected command {command}")

    def close(self):
        self.router.close_calls += 1
        self._connected = False
        if self.router.close_error:
            raise self.router.close_error


@pytest.fixture
def fake_router():
    return FakeRouter()


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{(tmp_path / 'test.db').as_posix()}",
        connect_args={"check_same_thread": False},
        poolclass=NullPool,
    )
    await init_db(bind=engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def configured(db):
    """A saved router configuration pointing at 192.168.88.1."""
    return await crud.system_config.upsert_system_config(db, schemas.SystemConfigUpdate(
        mikrotik_host="192.168.88.1",
        mikrotik_user="admin",
        mikrotik_password="s3cret",
        mikrotik_port=8728,
        polling_interval=15,
    ))


@pytest_asyncio.fixture
async def client(session_factory, fake_router):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gateway_factory] = lambda: fake_router.builder
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_device(db):
    async def _make(name="Core Router", ip="10.0.0.5", status=None, last_seen=None, **fields):
        device = await crud.device.create_device(db, schemas.DeviceCreate(name=name, ip=ip, **fields))
        if status is not None or last_seen is not None:
            device.status = status or device.status
            device.last_seen = last_seen
            db.add(device)
            await db.commit()
        return device
    return _make
