"""
Vibe Coding Platform - Test Configuration and Fixtures
"""
import os
import tempfile
import uuid
from pathlib import Path
from typing import AsyncGenerator
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['ANTHROPIC_API_KEY'] = 'test-api-key'
os.environ['APPS_PATH'] = tempfile.mkdtemp(prefix='vibecoding-apps-')
os.environ['PREVIEW_DOMAIN'] = 'preview.test'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['LOG_FILE'] = ''
os.environ['LOG_LEVEL'] = 'WARNING'

from app.main import app
from app.core.config import settings
from app.core.database import Base, get_db
from app.core.security import create_access_token
from app.core.types import generate_project_id
from app.modules.agents import get_completion_client
from app.modules.sandbox import ProjectFileStore

from mocks.mock_claude import MockCompletionClient

fake = Faker()

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def mock_client() -> MockCompletionClient:
    return MockCompletionClient()


@pytest.fixture
async def client(db_session: AsyncSession, mock_client: MockCompletionClient) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database and model overrides"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_completion_client] = lambda: mock_client

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def user_id() -> str:
    return str(uuid.uuid4())


def make_auth_headers(user_id: str, email: str = None) -> dict:
    token = create_access_token({'sub': user_id, 'email': email or fake.email()})
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def auth_headers(user_id: str) -> dict:
    """Generate authentication headers for a fresh identity"""
    return make_auth_headers(user_id)


@pytest.fixture
def other_auth_headers() -> dict:
    """Headers for a second, unrelated identity"""
    return make_auth_headers(str(uuid.uuid4()))


@pytest.fixture
def project_id() -> str:
    """Unused project id; its root under APPS_DIR does not exist yet"""
    return generate_project_id()


@pytest.fixture
def apps_dir() -> Path:
    return settings.APPS_DIR


@pytest.fixture
def store(tmp_path: Path) -> ProjectFileStore:
    """File store over an isolated, not-yet-created root"""
    return ProjectFileStore(tmp_path / 'site')
