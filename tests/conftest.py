import os

# Settings are resolved at import time
os.environ["ENVIRONMENT"] = "test"

from datetime import timedelta
from typing import Optional

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from api.dependencies.database import get_db_session
from client.api import ApiError
from core.security import create_access_token
from db.base import Base
from db.tables.job import Job, JobType
from db.tables.user import User, UserRole
from main import app
from utils.clock import utcnow


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def user_factory(db):
    counter = {"n": 0}

    async def create(role: UserRole = UserRole.APPLICANT, name: Optional[str] = None) -> User:
        counter["n"] += 1
        user = User(
            name=name or f"{role.value.title()} {counter['n']}",
            email=f"{role.value}{counter['n']}@example.com",
            hashed_password="not-a-real-hash",
            role=role,
            is_active=True,
        )
        db.add(user)
        await db.commit()
        return user

    return create


@pytest.fixture
def job_factory(db):
    async def create(owner: User, title: str = "Backend Engineer", opens: Optional[timedelta] = None,
                     closes: Optional[timedelta] = None, **overrides) -> Job:
        now = utcnow()
        values = dict(
            title=title,
            description="Build things",
            company="ACME",
            location="Remote",
            salary="100k",
            type=JobType.FULL_TIME,
            application_start_date=now - (opens or timedelta(days=1)),
            application_end_date=now + (closes or timedelta(days=1)),
            created_by=owner.id,
        )
        values.update(overrides)
        job = Job(**values)
        db.add(job)
        await db.commit()
        return job

    return create


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_db_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test/v1") as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token({'sub': user.email})}"}


@pytest.fixture
def headers():
    return auth_headers


class FakeApplicationsApi:
    """In-memory stand-in for ``ApplicationsApi`` recording every call."""

    def __init__(self):
        self.unseen: list[dict] = []
        self.employer_unseen: list[dict] = []
        self.unseen_count = 0
        self.calls: list[tuple] = []
        self.fail_polls = False
        self.fail_marks = False
        self.closed = False

    async def get_unseen_applications(self):
        self.calls.append(("get_unseen_applications",))
        if self.fail_polls:
            raise ApiError("Service unavailable", status_code=503)
        return list(self.unseen)

    async def get_employer_unseen_applications(self):
        self.calls.append(("get_employer_unseen_applications",))
        if self.fail_polls:
            raise ApiError("Service unavailable", status_code=503)
        return list(self.employer_unseen)

    async def mark_application_seen(self, application_id):
        self.calls.append(("mark_application_seen", application_id))
        if self.fail_marks:
            raise ApiError("Not authorized", status_code=403)
        return {"id": application_id, "isSeenByApplicant": True}

    async def mark_employer_seen(self, application_id):
        self.calls.append(("mark_employer_seen", application_id))
        if self.fail_marks:
            raise ApiError("Not authorized", status_code=403)
        return {"id": application_id, "isSeenByEmployer": True}

    async def get_unseen_count(self):
        self.calls.append(("get_unseen_count",))
        return self.unseen_count

    async def aclose(self):
        self.closed = True

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)


@pytest.fixture
def fake_api():
    return FakeApplicationsApi()


@pytest.fixture
def fake_api_class():
    return FakeApplicationsApi
