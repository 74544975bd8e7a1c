import os
from decimal import Decimal
from typing import AsyncGenerator, List

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

# Ensure critical settings exist before the app/config modules import.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./dev.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key-change-me-please-0123456789")

from app.models.enrollment import Enrollment, EnrollmentStatus
from app.models.seminar import Seminar
from app.models.user import Role, User
from app.utils.security import create_tokens, hash_password
from core.db import get_db
from core.db.base import Base
from main import app

# Use SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"

engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def setup_db():
    """Create and drop all tables for each test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for testing."""
    async with TestSessionLocal() as session:
        yield session


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Provide an async HTTP client for testing."""

    async def override_get_db():
        async with TestSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


def headers_for(user: User) -> dict:
    access_token, _ = create_tokens(user.id, user.role.value)
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture
async def create_test_user(db_session: AsyncSession):
    """Factory fixture to create users of any role."""

    async def _create_user(
        email: str, name: str = "Test User", role: Role = Role.STUDENT
    ) -> User:
        return await User.create_user(
            db_session,
            email=email,
            display_name=name,
            role=role,
            hashed_password=hash_password("TestPass123"),
        )

    return _create_user


@pytest.fixture
async def student_user(create_test_user) -> User:
    return await create_test_user("student@example.com", "Sam Student", Role.STUDENT)


@pytest.fixture
async def second_student(create_test_user) -> User:
    return await create_test_user("second@example.com", "Alex Second", Role.STUDENT)


@pytest.fixture
async def teacher_user(create_test_user) -> User:
    return await create_test_user("teacher@example.com", "Terry Teacher", Role.TEACHER)


@pytest.fixture
async def counselor_user(create_test_user) -> User:
    return await create_test_user("counselor@example.com", "Casey Counselor", Role.COUNSELOR)


@pytest.fixture
async def admin_user(create_test_user) -> User:
    return await create_test_user("admin@example.com", "Ada Admin", Role.ADMIN)


@pytest.fixture
def student_headers(student_user: User) -> dict:
    return headers_for(student_user)


@pytest.fixture
def teacher_headers(teacher_user: User) -> dict:
    return headers_for(teacher_user)


@pytest.fixture
def counselor_headers(counselor_user: User) -> dict:
    return headers_for(counselor_user)


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return headers_for(admin_user)


@pytest.fixture
async def test_seminar(db_session: AsyncSession, teacher_user: User) -> Seminar:
    """A seminar worth 2 service credits per session."""
    seminar = Seminar(
        title="Community Garden",
        description="Tend the school garden with a local partner",
        room="B12",
        capacity=2,
        hour=3,
        community_partner="City Parks",
        credits=Decimal("2.00"),
        credit_type="service",
        teacher_id=teacher_user.id,
    )
    db_session.add(seminar)
    await db_session.commit()
    await db_session.refresh(seminar)
    return seminar


@pytest.fixture
async def roster(
    db_session: AsyncSession,
    test_seminar: Seminar,
    student_user: User,
    second_student: User,
) -> List[Enrollment]:
    """Both students enrolled in the test seminar (which is then full)."""
    enrollments = [
        Enrollment(
            student_id=student.id,
            class_id=test_seminar.id,
            status=EnrollmentStatus.ENROLLED,
        )
        for student in (student_user, second_student)
    ]
    db_session.add_all(enrollments)
    await db_session.commit()
    return enrollments


@pytest.fixture
def make_headers():
    """Factory fixture for bearer headers of any user."""
    return headers_for
