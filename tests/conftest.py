"""테스트 공통 fixture (in-memory SQLite + httpx AsyncClient)"""
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.core.rate_limit import limiter
from app.main import app
from app.models import base
from app.models.base import Base
from app.models.course import Course
from app.models.user import User


@pytest.fixture(autouse=True)
def disable_ai(monkeypatch):
    """테스트에서는 외부 AI 호출을 하지 않음 (fallback 경로)"""
    monkeypatch.setattr(settings, "gemini_api_key", None)


@pytest_asyncio.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def test_session_factory(test_engine, monkeypatch):
    """앱과 백그라운드 작업이 같은 테스트 DB를 쓰도록 세션 팩토리 교체"""
    factory = async_sessionmaker(test_engine, expire_on_commit=False)
    monkeypatch.setattr(base, "_engine", test_engine)
    monkeypatch.setattr(base, "_session_factory", factory)
    return factory


@pytest_asyncio.fixture
async def test_db_session(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(test_session_factory):
    limiter.reset()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def seed_users_and_course(test_db_session):
    """멘토(1), 학습자(2, 3), 강좌(1)"""
    test_db_session.add_all(
        [
            User(id=1, email="mentor@example.com", first_name="Mina", last_name="Kim", role="mentor", organization_id="org-1"),
            User(id=2, email="learner@example.com", first_name="Jun", last_name="Lee", role="learner", organization_id="org-1"),
            User(id=3, email="other@example.com", first_name="Sora", last_name="Park", role="learner", organization_id="org-2"),
        ]
    )
    await test_db_session.flush()
    test_db_session.add(
        Course(
            id=1,
            title="Introduction to React Development",
            description="Build user interfaces with JavaScript",
            mentor_id=1,
            organization_id="org-1",
            category="Web",
        )
    )
    await test_db_session.commit()
