"""Shared pytest fixtures."""

from datetime import datetime

import pytest
import yaml
from litestar.testing import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import verses.db.models  # noqa: F401 register all models on Base
from verses.app_factory import create_app
from verses.auth.passwords import hash_password
from verses.config import DatabaseConfig, Settings, get_settings
from verses.db.base import Base
from verses.db.models import Like, Poem, User

TEST_SECRET = "test-secret-key"
TEST_PASSWORD = "secret1"

_PASSWORD_HASH = hash_password(TEST_PASSWORD)


@pytest.fixture
def temp_app_yaml(tmp_path):
    """Create a temporary app.yaml file for testing."""
    config_path = tmp_path / "app.yaml"

    def _create_config(config: dict):
        with open(config_path, "w") as f:
            yaml.safe_dump(config, f)
        return config_path

    return _create_config


@pytest.fixture
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'services.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(engine):
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session


@pytest.fixture
def make_user(db_session):
    """Factory inserting users named ``User 1``, ``User 2``, ..."""
    counter = {"n": 0}

    async def _make(display_name: str | None = None, email: str | None = None) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            email=email or f"user{n}@verses.io",
            display_name=display_name or f"User {n}",
            password_hash=_PASSWORD_HASH,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_poem(db_session):
    async def _make(
        owner: User,
        title: str = "A poem",
        content: str = "<p>Some lines</p>",
        is_published: bool = True,
        created_at: datetime | None = None,
    ) -> Poem:
        poem = Poem(user_id=owner.id, title=title, content=content, is_published=is_published)
        if created_at is not None:
            poem.created_at = created_at
        db_session.add(poem)
        await db_session.commit()
        await db_session.refresh(poem)
        return poem

    return _make


@pytest.fixture
def make_like(db_session):
    async def _make(user: User, poem: Poem) -> Like:
        like = Like(user_id=user.id, poem_id=poem.id)
        db_session.add(like)
        await db_session.commit()
        return like

    return _make


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path):
    return Settings(
        secret_key=TEST_SECRET,
        db=DatabaseConfig(url=f"sqlite+aiosqlite:///{tmp_path / 'api.db'}"),
    )


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register(client):
    """Register an account through the API and return the auth response body."""
    counter = {"n": 0}

    def _register(display_name: str | None = None, email: str | None = None, password: str = TEST_PASSWORD) -> dict:
        counter["n"] += 1
        n = counter["n"]
        response = client.post(
            "/api/auth/register",
            json={
                "email": email or f"poet{n}@verses.io",
                "password": password,
                "displayName": display_name or f"Poet {n}",
            },
        )
        assert response.status_code == 200, response.text
        return response.json()

    return _register
