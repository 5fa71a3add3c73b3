from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime

from learnhub.core.config import SETTINGS, Settings
from learnhub.core.metrics import CERTIFICATES
from learnhub.models.achievement import AchievementEvent
from learnhub.models.certificate import Certificate
from learnhub.repos.certificate_repo import CertificateRepo
from learnhub.services.achievements import AchievementPublisher
from learnhub.services.guard import KeyedGuard
from learnhub.services.normalizer import normalize_certificate
from learnhub.services.state import EngineState

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(UTC)


def verification_code(prefix: str, category: str, year: int, sequence: int) -> str:
    """``LH-PR-2024-002``: prefix, category head, year, sequence.

    The category head is its first two characters upper-cased, punctuation
    included (``C++`` gives ``C+``).
    """
    return f"{prefix}-{category[:2].upper()}-{year}-{sequence:03d}"


class CertificateIssuer:
    """Issues completion certificates.

    The sequence number in a verification code is the count of locally
    known certificates plus one.  That is only correct when the local cache
    holds the full certificate history (initialization loads it) and only
    one session issues at a time.  Issuance shares the per-enrollment guard
    with progress updates so neither overwrites the other's enrollment.
    """

    def __init__(
        self,
        state: EngineState,
        certificates: CertificateRepo,
        achievements: AchievementPublisher,
        settings: Settings = SETTINGS,
        clock: Clock = utcnow,
        guard: KeyedGuard | None = None,
    ) -> None:
        self._state = state
        self._certificates = certificates
        self._achievements = achievements
        self._settings = settings
        self._clock = clock
        self._guard = guard or KeyedGuard()

    def next_verification_code(self, category: str, year: int) -> str:
        sequence = len(self._state.certificates) + 1
        code = verification_code(
            self._settings.certificate_prefix, category, year, sequence
        )
        while self._state.has_verification_code(code):
            sequence += 1
            code = verification_code(
                self._settings.certificate_prefix, category, year, sequence
            )
        return code

    async def complete_course(self, course_id: str, user_id: str) -> Certificate | None:
        async with self._guard.hold((user_id, course_id)):
            return await self._complete(course_id, user_id)

    async def _complete(self, course_id: str, user_id: str) -> Certificate | None:
        ctx = {"user_id": user_id, "course_id": course_id, "operation": "certificate"}

        course = self._state.get_course(course_id)
        enrollment = self._state.find_enrollment(course_id, user_id)
        if course is None or enrollment is None or not course.has_certificate:
            CERTIFICATES.labels(outcome="ineligible").inc()
            logger.info("Certificate not issued: course not eligible", extra=ctx)
            return None

        if enrollment.certificate_issued and enrollment.certificate_id:
            existing = self._state.get_certificate(enrollment.certificate_id)
            if existing is not None:
                CERTIFICATES.labels(outcome="existing").inc()
                return existing

        if enrollment.progress < 100:
            CERTIFICATES.labels(outcome="ineligible").inc()
            logger.info(
                "Certificate not issued: progress=%d%%",
                enrollment.progress,
                extra={**ctx, "enrollment_id": enrollment.id},
            )
            return None

        now = self._clock()
        record = {
            "user_id": user_id,
            "course_id": course_id,
            "course_name": course.title,
            "instructor_name": course.instructor.name,
            "completion_date": now.isoformat(),
            "grade": self._settings.certificate_grade,
            "verification_code": self.next_verification_code(
                course.category, now.year
            ),
        }

        try:
            certificate = normalize_certificate(await self._certificates.insert(record))
        except Exception:
            CERTIFICATES.labels(outcome="persistence_failed").inc()
            logger.exception(
                "Certificate could not be persisted",
                extra={**ctx, "enrollment_id": enrollment.id},
            )
            return None

        self._state.add_certificate(certificate)
        self._state.put_enrollment(
            replace(enrollment, certificate_issued=True, certificate_id=certificate.id)
        )
        self._achievements.emit(AchievementEvent(user_id, "certificate_earned"))

        CERTIFICATES.labels(outcome="issued").inc()
        logger.info(
            "Certificate %s issued (%s)",
            certificate.id,
            certificate.verification_code,
            extra={**ctx, "enrollment_id": enrollment.id},
        )
        return certificate
