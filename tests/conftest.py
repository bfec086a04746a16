"""
Shared fixtures: isolated sqlite database, receipt store and signed-in client.
"""
import os
import tempfile

import pytest
import pytest_asyncio

# Environment must be in place before finscope reads its settings.
_TMP_DIR = tempfile.mkdtemp(prefix="finscope-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["ENV"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key-for-pytest-only-0123456789"
os.environ["LLM_API_KEY"] = "stub"
os.environ["RECEIPTS_STORAGE_DIR"] = os.path.join(_TMP_DIR, "receipts")
os.environ["LOG_DIR"] = os.path.join(_TMP_DIR, "logs")

import httpx  # noqa: E402

from finscope.core.cookies import SESSION_COOKIE_NAME, make_session_value  # noqa: E402
from finscope.core.database import AsyncSessionLocal, Base, _import_models, engine  # noqa: E402
from finscope.core.rate_limit import rate_limiter  # noqa: E402
from finscope.domain.users.models import User  # noqa: E402
from finscope.services.storage import LocalObjectStorage  # noqa: E402


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest_asyncio.fixture
async def db_session():
    _import_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def user(db_session):
    user = User(email="saver@example.com")
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
def storage(tmp_path):
    return LocalObjectStorage(tmp_path / "objects")


@pytest_asyncio.fixture
async def anonymous_client(db_session):
    from main import app

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest_asyncio.fixture
async def client(db_session, user, storage):
    from main import app
    from finscope.services.storage import get_storage

    app.dependency_overrides[get_storage] = lambda: storage
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport,
        base_url="http://testserver",
        cookies={SESSION_COOKIE_NAME: make_session_value(user.email)},
    ) as client:
        yield client
    app.dependency_overrides.clear()
