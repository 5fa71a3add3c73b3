from __future__ import annotations

import sys
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from learnhub.api import sessions as sessions_module
from learnhub.api.sessions import Collaborators, sessions
from learnhub.core.config import SETTINGS
from learnhub.main import app
from learnhub.models.principal import Principal
from learnhub.repos.certificate_repo import InMemoryCertificateRepo
from learnhub.repos.course_directory import InMemoryCourseDirectory
from learnhub.repos.enrollment_repo import InMemoryEnrollmentRepo
from learnhub.repos.payment_repo import InMemoryPaymentRepo
from learnhub.services import token_service
from learnhub.services.achievements import AchievementSink, InMemoryAchievementSink
from learnhub.services.certificates import Clock, utcnow
from learnhub.services.engine import LearningEngine
from learnhub.services.identity import StaticIdentity
from learnhub.services.task_queue import task_queue

# Ensure repo root is on sys.path so `import learnhub` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def course_row(course_id: str = "course-1", **overrides) -> dict:
    """A published, approved course row as the course directory returns it."""
    row = {
        "id": course_id,
        "title": "Python for Programmers",
        "instructor": {"id": "inst-1", "name": "Ada Byron"},
        "category": "Programming",
        "price": 50.0,
        "total_lessons": 4,
        "is_published": True,
        "is_approved": True,
        "is_draft": False,
    }
    row.update(overrides)
    return row


def make_engine(
    *,
    user_id: str | None = "student-1",
    roles: frozenset[str] = frozenset({"student"}),
    courses: list[dict] | None = None,
    enrollments=None,
    payments=None,
    certificates=None,
    achievements: AchievementSink | None = None,
    clock: Clock = utcnow,
) -> LearningEngine:
    """Engine wired to fresh in-memory collaborators unless overridden."""
    principal = Principal(user_id=user_id, roles=roles) if user_id else None
    directory = InMemoryCourseDirectory([course_row()] if courses is None else courses)
    return LearningEngine(
        courses=directory,
        enrollments=enrollments or InMemoryEnrollmentRepo(),
        payments=payments
        or InMemoryPaymentRepo(
            SETTINGS.platform_fee_rate, instructor_of=directory.instructor_of
        ),
        certificates=certificates or InMemoryCertificateRepo(),
        achievements=achievements or InMemoryAchievementSink(),
        identity=StaticIdentity(principal),
        clock=clock,
    )


def fixed_clock(value: datetime) -> Clock:
    return lambda: value


@pytest.fixture(autouse=True)
def reset_task_queue() -> None:
    """Clear task queues between tests."""
    if hasattr(task_queue, "_queues"):
        task_queue._queues.clear()  # type: ignore[union-attr]


@pytest.fixture(autouse=True)
def collaborators(monkeypatch: pytest.MonkeyPatch) -> Collaborators:
    """Fresh in-memory collaborators and no cached sessions for every test."""
    directory = InMemoryCourseDirectory(
        [course_row(), course_row("course-2", title="Data Science", price=20.0)]
    )
    fresh = Collaborators(
        courses=directory,
        enrollments=InMemoryEnrollmentRepo(),
        payments=InMemoryPaymentRepo(
            SETTINGS.platform_fee_rate, instructor_of=directory.instructor_of
        ),
        certificates=InMemoryCertificateRepo(),
    )
    monkeypatch.setattr(sessions_module, "collaborators", fresh)
    sessions._engines.clear()
    return fresh


@pytest.fixture
def client() -> Iterator[TestClient]:
    # One event loop for the whole test, so background persistence spawned
    # by one request can finish before the next.
    with TestClient(app) as c:
        yield c


def mint_token(
    username: str = "test-user",
    roles: list[str] | None = None,
) -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=username, roles=roles)


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def token() -> str:
    """Token with the default role (student)."""
    return mint_token()


@pytest.fixture
def admin_token() -> str:
    return mint_token(username="test-admin", roles=["admin"])


async def enroll(engine: LearningEngine, course_id: str = "course-1"):
    """Pay for and enroll the engine's user in a course; returns the enrollment."""
    assert engine.user is not None
    user_id = engine.user.user_id
    course = engine.state.get_course(course_id)
    assert course is not None
    payment = engine.process_payment(course_id, user_id, course.price, "card")
    return await engine.enroll_in_course(course_id, user_id, payment)
