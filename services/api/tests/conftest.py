"""
Shared fixtures: a throwaway SQLite database per test, the FastAPI app
driven in-process through httpx, and helpers to register users.
"""
import httpx
import pytest

from devlink.config import Settings
from devlink.database import Database
from devlink.main import create_app
from devlink.models import User
from devlink.security import Identity


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'devlink.db'}",
        jwt_secret_key="test-secret",
        github_api_url="https://github.test",
        log_level="WARNING",
    )


@pytest.fixture
async def app(settings):
    app = create_app(settings)
    async with app.router.lifespan_context(app):
        yield app


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


@pytest.fixture
async def database(settings):
    db = Database(settings)
    await db.init_db()
    yield db
    await db.dispose()


@pytest.fixture
async def session(database):
    async with database.sessionmaker() as s:
        yield s


async def register(client, name: str, email: str, password: str = "password123") -> dict:
    """Register through the API and return auth headers plus identity."""
    resp = await client.post(
        "/api/users", json={"name": name, "email": email, "password": password}
    )
    assert resp.status_code == 200, resp.text
    headers = {"x-auth-token": resp.json()["token"]}
    me = await client.get("/api/auth", headers=headers)
    assert me.status_code == 200, me.text
    return {"headers": headers, "id": me.json()["id"], "name": name}


@pytest.fixture
def make_user(client):
    async def _make(name: str, email: str) -> dict:
        return await register(client, name, email)

    return _make


@pytest.fixture
def add_user(session):
    """Insert users directly, for service-level tests."""

    async def _add(name: str, email: str) -> Identity:
        user = User(name=name, email=email, password="x", avatar=f"https://avatar.test/{name}")
        session.add(user)
        await session.commit()
        return Identity(id=user.id, name=user.name)

    return _add
