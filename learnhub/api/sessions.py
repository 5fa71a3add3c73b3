"""Per-user engine sessions for the HTTP process.

Collaborators are process-wide: PostgreSQL-backed when DATABASE_URL is
set, in-memory otherwise.  Each authenticated user gets one
LearningEngine whose local state is built by ``initialize()`` the first
time that user calls the API.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from learnhub.core.config import SETTINGS
from learnhub.core.metrics import ACTIVE_SESSIONS
from learnhub.db.engine import async_session_factory
from learnhub.models.principal import Principal
from learnhub.repos.certificate_repo import CertificateRepo, InMemoryCertificateRepo
from learnhub.repos.course_directory import (
    CourseDirectory,
    InMemoryCourseDirectory,
    seed_sample_courses,
)
from learnhub.repos.enrollment_repo import EnrollmentRepo, InMemoryEnrollmentRepo
from learnhub.repos.payment_repo import InMemoryPaymentRepo, PaymentRepo
from learnhub.repos.pg_repos import (
    PgCertificateRepo,
    PgCourseDirectory,
    PgEnrollmentRepo,
    PgPaymentRepo,
)
from learnhub.services.achievements import AchievementSink, QueueAchievementSink
from learnhub.services.engine import LearningEngine
from learnhub.services.guard import KeyedGuard
from learnhub.services.identity import StaticIdentity
from learnhub.services.task_queue import task_queue

logger = logging.getLogger(__name__)


@dataclass
class Collaborators:
    courses: CourseDirectory
    enrollments: EnrollmentRepo
    payments: PaymentRepo
    certificates: CertificateRepo
    achievements: AchievementSink = field(
        default_factory=lambda: QueueAchievementSink(task_queue)
    )


def default_collaborators() -> Collaborators:
    if async_session_factory is not None:
        return Collaborators(
            courses=PgCourseDirectory(async_session_factory),
            enrollments=PgEnrollmentRepo(async_session_factory),
            payments=PgPaymentRepo(async_session_factory, SETTINGS.platform_fee_rate),
            certificates=PgCertificateRepo(async_session_factory),
        )
    directory = InMemoryCourseDirectory()
    if SETTINGS.is_dev:
        seed_sample_courses(directory)
    return Collaborators(
        courses=directory,
        enrollments=InMemoryEnrollmentRepo(),
        payments=InMemoryPaymentRepo(
            SETTINGS.platform_fee_rate, instructor_of=directory.instructor_of
        ),
        certificates=InMemoryCertificateRepo(),
    )


class SessionRegistry:
    def __init__(self, factory: Callable[[Principal], LearningEngine]) -> None:
        self._factory = factory
        self._engines: dict[str, LearningEngine] = {}
        self._guard = KeyedGuard()

    async def get(self, principal: Principal) -> LearningEngine:
        engine = self._engines.get(principal.user_id)
        if engine is not None:
            return engine

        # Two first requests from the same user must not build two engines.
        async with self._guard.hold(principal.user_id):
            engine = self._engines.get(principal.user_id)
            if engine is None:
                engine = self._factory(principal)
                await engine.initialize()
                self._engines[principal.user_id] = engine
                ACTIVE_SESSIONS.set(len(self._engines))
                logger.info("Session opened for user=%s", principal.user_id)
        return engine

    def __len__(self) -> int:
        return len(self._engines)

    async def close_all(self) -> None:
        for engine in self._engines.values():
            await engine.drain()
        self._engines.clear()
        ACTIVE_SESSIONS.set(0)


collaborators = default_collaborators()


def build_engine(principal: Principal) -> LearningEngine:
    return LearningEngine(
        courses=collaborators.courses,
        enrollments=collaborators.enrollments,
        payments=collaborators.payments,
        certificates=collaborators.certificates,
        achievements=collaborators.achievements,
        identity=StaticIdentity(principal),
        settings=SETTINGS,
    )


sessions = SessionRegistry(build_engine)
