import os
from pathlib import Path

# Settings are read at import time by giftlist.db; set them before any giftlist import.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./giftlist_test.sqlite"
os.environ["BACKOFFICE_PASSWORD"] = "test-password"
os.environ["SESSION_COOKIE_SECURE"] = "false"
os.environ["REDIS_URL"] = "redis://localhost:6379/15"
os.environ["PUBLIC_BASE_URL"] = "http://gifts.test"

import pytest
import yaml
from fakeredis.aioredis import FakeRedis
from fastapi import FastAPI
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

from giftlist import models  # noqa: F401
from giftlist.auth.gate import BackofficeGateMiddleware, GateConfig
from giftlist.config import get_settings
from giftlist.db import Base, get_db
from giftlist.utils.errors import install_exception_handlers


def get_test_config():
    config_path = Path(__file__).parent.parent / "tests_config.yaml"
    if not config_path.exists():
        return {}
    with open(config_path, "r") as f:
        return yaml.safe_load(f) or {}


def pytest_collection_modifyitems(config, items):
    groups = get_test_config().get("test_groups", {})
    tests_root = Path(__file__).parent
    for item in items:
        try:
            rel_path = Path(str(item.fspath)).relative_to(tests_root)
        except ValueError:
            continue
        group_name = rel_path.parts[0] if len(rel_path.parts) > 1 else "core"
        if group_name in groups and not groups[group_name]:
            item.add_marker(pytest.mark.skip(reason=f"Group '{group_name}' is disabled in tests_config.yaml"))


@pytest.fixture
async def sqlite_db_session(tmp_path):
    db_path = tmp_path / "db_only_tests.sqlite"
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", future=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def routes_db_path(tmp_path):
    return tmp_path / "routes.sqlite"


@pytest.fixture
def sync_engine(routes_db_path):
    engine = create_engine(f"sqlite:///{routes_db_path}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def seed_session(sync_engine):
    """Plain sync session on the database served by `app_factory` apps."""
    with Session(sync_engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def app_factory(routes_db_path, sync_engine):
    # NullPool: TestClient drives the app from its own event loop.
    engine = create_async_engine(f"sqlite+aiosqlite:///{routes_db_path}", poolclass=NullPool)
    session_factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

    async def _db_override():
        async with session_factory() as session:
            yield session

    def _build(*routers, gate: bool = False) -> FastAPI:
        app = FastAPI()
        if gate:
            app.add_middleware(BackofficeGateMiddleware, config=GateConfig.from_settings(get_settings()))
        install_exception_handlers(app)
        for router in routers:
            app.include_router(router)
        app.dependency_overrides[get_db] = _db_override
        app.state.redis = FakeRedis(decode_responses=True)
        return app

    return _build
