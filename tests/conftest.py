import pytest
from httpx import ASGITransport, AsyncClient

from portfolio_api.core.config import Settings
from portfolio_api.core.db import Database
from portfolio_api.core.security import get_password_hash, issue_tokens
from portfolio_api.db.repositories.user_repository import UserRepository
from portfolio_api.main import create_app

USER_EMAIL = "owner@example.com"
USER_PASSWORD = "correct-horse"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        jwt_secret="test-secret",
        file_password_rounds=4,
    )


@pytest.fixture
async def database(settings):
    db = Database(settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
async def session(database):
    async with database.session_factory() as session:
        yield session


@pytest.fixture
async def user(database):
    async with database.session_factory() as session:
        return await UserRepository(session).create(
            email=USER_EMAIL,
            password_hash=get_password_hash(USER_PASSWORD, rounds=4),
            name="Owner"
        )


@pytest.fixture
def app(settings, database):
    # ASGITransport не запускает lifespan, состояние задаётся вручную
    application = create_app(settings)
    application.state.db = database
    return application


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def token_for(settings):
    def _token_for(user_id, email=None):
        return issue_tokens(user_id, email, settings).access_token
    return _token_for


@pytest.fixture
def auth_headers(user, token_for):
    return {"Authorization": f"Bearer {token_for(user.id, user.email)}"}
