"""
Department Portal - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

# Set testing environment
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test_portal.db'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['BCRYPT_ROUNDS'] = '4'

from app.main import app
from app.core.database import Base, get_db
from app.models.profile import Profile, UserRole
from app.models.student import Student
from app.models.teacher import Teacher, TeacherDesignation
from app.core.security import get_password_hash
from helpers import fake, make_headers, ADMIN_PASSWORD, TEACHER_PASSWORD, STUDENT_ROLL_NO

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test_portal.db'
# NullPool: each test runs on its own event loop
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
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def unconfigured_client() -> AsyncGenerator[AsyncClient, None]:
    """Test client whose data store is not configured"""
    async def override_get_db():
        yield None

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> Profile:
    """Create an admin test user"""
    user = Profile(
        email=fake.unique.email(),
        password_hash=get_password_hash(ADMIN_PASSWORD),
        role=UserRole.ADMIN,
        is_active=True,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def teacher_user(db_session: AsyncSession) -> Profile:
    """Create a teacher auth record with its teacher profile"""
    user = Profile(
        email=fake.unique.email(),
        password_hash=get_password_hash(TEACHER_PASSWORD),
        role=UserRole.TEACHER,
        is_active=True,
    )
    db_session.add(user)
    await db_session.flush()
    db_session.add(Teacher(
        user_id=user.user_id,
        teacher_uid='T-FIXT01',
        full_name=fake.name(),
        phone='01900000000',
        designation=TeacherDesignation.LECTURER,
        profile=user,
    ))
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def student_user(db_session: AsyncSession) -> Profile:
    """Create a student auth record with its student profile"""
    user = Profile(
        email=fake.unique.email(),
        password_hash=get_password_hash(STUDENT_ROLL_NO),
        role=UserRole.STUDENT,
        is_active=True,
    )
    db_session.add(user)
    await db_session.flush()
    db_session.add(Student(
        user_id=user.user_id,
        roll_no=STUDENT_ROLL_NO,
        full_name=fake.name(),
        phone='01600000000',
        term='1-1',
        session='2021',
        profile=user,
    ))
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
def admin_auth_headers(admin_user: Profile) -> dict:
    """Generate authentication headers for admin user"""
    return make_headers(admin_user)


@pytest.fixture
def teacher_auth_headers(teacher_user: Profile) -> dict:
    """Generate authentication headers for teacher user"""
    return make_headers(teacher_user)


@pytest.fixture
def student_auth_headers(student_user: Profile) -> dict:
    """Generate authentication headers for student user"""
    return make_headers(student_user)
