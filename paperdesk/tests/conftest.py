"""
Shared fixtures: a fresh SQLite file database per test, identities, tokens
and a few workflow shortcuts.
"""
from datetime import date, timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from paperdesk.database import build_engine, build_sessionmaker, create_all, get_db
from paperdesk.main import app
from paperdesk.rbac import Identity, Role, create_access_token
from paperdesk.services.assignment_registry import create_assignment
from paperdesk.services.faculty_directory import register_profile
from paperdesk.services.question_paper_store import ExamMetadata, submit_question_paper
from paperdesk.services.response_workflow import submit_response

ADMIN = Identity(role=Role.ADMIN, username="exam-cell")

FACULTY = {
    "F1": "Asha Rao",
    "F2": "Vikram Nair",
    "F3": "Meera Iyer",
}

DEADLINE = (date.today() + timedelta(days=14)).isoformat()


def faculty(faculty_id: str) -> Identity:
    return Identity(role=Role.FACULTY, faculty_id=faculty_id, username=faculty_id.lower())


def auth_headers(identity: Identity) -> dict:
    token = create_access_token(identity.role, identity.faculty_id, identity.username)
    return {"Authorization": f"Bearer {token}"}


def sample_metadata(**overrides) -> ExamMetadata:
    fields = dict(
        exam_name="End Semester Examination",
        department="Computer Science and Engineering",
        semester="III",
        subject_title="Data Structures",
        regulation="R2021",
        time="3 Hours",
        max_marks=100,
    )
    fields.update(overrides)
    return ExamMetadata(**fields)


PART_A = [f"Define term {i}." for i in range(1, 11)]
PART_B = [f"Explain concept {i} with an example." for i in range(1, 9)]
PART_C = ["Design a balanced search tree.", "Analyse hashing with chaining."]


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'paperdesk_test.db'}")
    await create_all(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_sessionmaker(engine)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def directory(db):
    """F1, F2 and F3 registered in the faculty directory."""
    for faculty_id, name in FACULTY.items():
        await register_profile(db, ADMIN, faculty_id, name, email=f"{faculty_id.lower()}@college.edu")
    return FACULTY


@pytest.fixture
def accepted_assignment(db, directory):
    """Create an assignment and accept it as the faculty member."""
    async def make(faculty_id="F1", subject_code="CS101", role="setter"):
        await create_assignment(
            db, ADMIN, faculty_id, FACULTY[faculty_id], subject_code,
            "Data Structures", "R2021", role, DEADLINE
        )
        return await submit_response(db, faculty(faculty_id), faculty_id, subject_code, role, "yes")
    return make


@pytest.fixture
def submitted_paper(db, accepted_assignment):
    """Accepted assignment plus a submitted question paper."""
    async def make(faculty_id="F1", subject_code="CS101", role="setter"):
        await accepted_assignment(faculty_id, subject_code, role)
        return await submit_question_paper(
            db, faculty(faculty_id), faculty_id, subject_code, role,
            sample_metadata(), PART_A, PART_B, PART_C
        )
    return make


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Async test client bound to the per-test database."""
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.state.limiter.enabled = False
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
