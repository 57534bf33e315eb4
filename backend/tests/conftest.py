import os
from types import SimpleNamespace

os.environ.setdefault("SHOOT_DATABASE_URL_OVERRIDE", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SHOOT_APP_ENV", "test")
os.environ.setdefault("SHOOT_APP_DEBUG", "false")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import shoot.models  # noqa: E402,F401
from shoot.core.database import Base  # noqa: E402
from shoot.services.llm_gateway import llm_gateway  # noqa: E402


@pytest_asyncio.fixture
async def db():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def no_llm(monkeypatch):
    monkeypatch.setattr(llm_gateway, "api_key", "")
    return llm_gateway


@pytest.fixture
def fake_llm(monkeypatch):
    """Configured gateway whose `complete` returns queued replies in order."""
    replies: list[str] = []
    calls: list[dict] = []

    async def _complete(**kwargs):
        calls.append(kwargs)
        if not replies:
            raise AssertionError("Unexpected LLM call")
        return replies.pop(0)

    monkeypatch.setattr(llm_gateway, "api_key", "sk-test-key")
    monkeypatch.setattr(llm_gateway, "complete", _complete)
    return SimpleNamespace(replies=replies, calls=calls)
