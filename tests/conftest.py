"""
STMS Reporting - Test Configuration and Fixtures
"""
import os
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from faker import Faker

# Set testing environment
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['SCHOOL_TIMEZONE'] = 'UTC'
os.environ['LOG_LEVEL'] = 'WARNING'

from app.main import app
from app.auth.jwt import create_access_token
from app.helpers.joins import JoinedView
from app.helpers.normalizer import normalize_snapshot
from app.helpers.report_context import ReportContext, get_report_context

fake = Faker()
Faker.seed(1234)

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def iso(value: datetime) -> str:
    return value.isoformat()


def server_ts(value: datetime) -> dict:
    """Serialized server timestamp as the document store returns it."""
    return {"seconds": int(value.timestamp()), "nanoseconds": 0}


def make_view(raw: dict) -> JoinedView:
    return JoinedView(normalize_snapshot(raw, tz=timezone.utc))


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def raw_snapshot() -> dict:
    """
    teacher-1 owns class c1 and tasks t1-t3; teacher-2 owns c2 and t4.

    Ani (c1) : t1 graded 90, t2 submitted, t3 open  -> 2/3 submitted
    Budi (c1): t1 graded 75 after the deadline
    Doe, Jane (c2): nothing submitted
    """
    return {
        "users": [
            {"id": "teacher-1", "uid": "teacher-1", "name": "Bu Sari", "role": "teacher",
             "email": "sari@school.id", "createdAt": iso(NOW - timedelta(days=100))},
            {"id": "doc-s1", "uid": "uid-s1", "name": "Ani", "role": "student", "classId": "c1",
             "email": "ani@school.id", "createdAt": iso(NOW - timedelta(days=2))},
            {"id": "s2", "name": "Budi", "role": "student", "classId": "c1",
             "email": "budi@school.id", "createdAt": server_ts(NOW - timedelta(days=10))},
            {"id": "s3", "uid": "s3", "name": "Doe, Jane", "role": "student", "classId": "c2",
             "email": "jane@school.id", "createdAt": iso(NOW - timedelta(days=30))},
        ],
        "classes": [
            {"id": "c1", "name": "X IPA 1", "subject": "Biologi", "createdBy": "teacher-1",
             "createdAt": iso(NOW - timedelta(days=60))},
            {"id": "c2", "name": "X IPS 2", "subject": "Sejarah", "createdBy": "teacher-2",
             "createdAt": iso(NOW - timedelta(days=60))},
        ],
        "tasks": [
            {"id": "t1", "title": "Essay", "assignedClasses": ["c1"], "createdBy": "teacher-1",
             "deadline": iso(NOW - timedelta(days=5)), "createdAt": iso(NOW - timedelta(days=20))},
            {"id": "t2", "title": "Lab Report", "assignedClasses": ["c1"], "createdBy": "teacher-1",
             "deadline": iso(NOW + timedelta(days=2)), "createdAt": iso(NOW - timedelta(days=1))},
            {"id": "t3", "title": "Project", "assignedClasses": ["c1", "c2"], "createdBy": "teacher-1",
             "deadline": iso(NOW + timedelta(days=10)), "createdAt": iso(NOW - timedelta(days=3))},
            {"id": "t4", "title": "Timeline", "assignedClasses": ["c2"], "createdBy": "teacher-2",
             "deadline": iso(NOW - timedelta(days=1)), "createdAt": iso(NOW - timedelta(days=40))},
        ],
        "submissions": [
            # submitted under the document id, graded
            {"id": "sub1", "taskId": "t1", "studentId": "doc-s1", "studentName": "Ani",
             "submittedAt": server_ts(NOW - timedelta(days=6)), "grade": 90,
             "teacherComment": "Bagus", "gradedAt": iso(NOW - timedelta(days=4))},
            # submitted under the auth uid, waiting for a grade
            {"id": "sub2", "taskId": "t2", "studentId": "uid-s1", "studentName": "Ani",
             "submittedAt": iso(NOW - timedelta(hours=5)), "grade": None},
            # late but graded
            {"id": "sub3", "taskId": "t1", "studentId": "s2", "studentName": "Budi",
             "submittedAt": iso(NOW - timedelta(days=4)), "grade": 75},
            # references a task that no longer exists
            {"id": "sub4", "taskId": "ghost", "studentId": "s2",
             "submittedAt": iso(NOW - timedelta(hours=1))},
        ],
    }


@pytest.fixture
def view(raw_snapshot):
    return make_view(raw_snapshot)


@pytest.fixture
def build_view():
    return make_view


@pytest.fixture
def bulk_snapshot() -> dict:
    """A class of generated students with mixed submissions."""
    students = [
        {"id": f"gen-{i}", "uid": f"gen-{i}", "name": fake.name(), "role": "student", "classId": "c1"}
        for i in range(12)
    ]
    tasks = [
        {"id": f"task-{i}", "title": fake.sentence(nb_words=3), "assignedClasses": ["c1"],
         "deadline": iso(NOW - timedelta(days=i - 2))}
        for i in range(4)
    ]
    submissions = []
    for i, student in enumerate(students):
        for j, task in enumerate(tasks):
            if (i + j) % 3 == 0:
                submissions.append({
                    "id": f"sub-{i}-{j}", "taskId": task["id"], "studentId": student["id"],
                    "submittedAt": iso(NOW - timedelta(hours=i + j)),
                    "grade": 60 + i if j % 2 == 0 else None,
                })
    return {
        "users": students,
        "classes": [{"id": "c1", "name": "XI IPA 3", "createdBy": "teacher-1"}],
        "tasks": tasks,
        "submissions": submissions,
    }


# ---------------------------
# API fixtures
# ---------------------------
def auth_headers(user_id: str, role: str) -> dict:
    token = create_access_token({"user_id": user_id, "role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_headers():
    return auth_headers


@pytest.fixture
def teacher_headers() -> dict:
    return auth_headers("teacher-1", "teacher")


@pytest.fixture
def admin_headers() -> dict:
    return auth_headers("admin-1", "admin")


@pytest.fixture
def student_headers() -> dict:
    return auth_headers("uid-s1", "student")


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Test client with the report clock pinned to NOW"""
    app.dependency_overrides[get_report_context] = lambda: ReportContext(now=NOW, tz=timezone.utc)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()
