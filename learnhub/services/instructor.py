"""Instructor-side views: who enrolled in a course, and what it earned.

Both read straight from the collaborators rather than the session cache,
since the cache only holds the signed-in user's own history.  A store
failure surfaces as PersistenceError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from learnhub.core.config import SETTINGS, Settings
from learnhub.models.enrollment import Enrollment
from learnhub.models.payment import Payment
from learnhub.repos.enrollment_repo import EnrollmentRepo
from learnhub.repos.payment_repo import PaymentRepo
from learnhub.services.errors import PersistenceError
from learnhub.services.normalizer import (
    normalize_all,
    normalize_enrollment,
    normalize_payment,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RevenueSummary:
    """Totals over completed payments only."""

    total_revenue: float
    platform_fees: float
    instructor_earnings: float
    payment_count: int


def summarize_revenue(payments: list[Payment]) -> RevenueSummary:
    completed = [p for p in payments if p.is_completed]
    return RevenueSummary(
        total_revenue=round(sum(p.amount for p in completed), 2),
        platform_fees=round(sum(p.platform_fee for p in completed), 2),
        instructor_earnings=round(sum(p.instructor_earnings for p in completed), 2),
        payment_count=len(completed),
    )


class InstructorDesk:
    def __init__(
        self,
        enrollments: EnrollmentRepo,
        payments: PaymentRepo,
        settings: Settings = SETTINGS,
    ) -> None:
        self._enrollments = enrollments
        self._payments = payments
        self._settings = settings

    async def course_students(self, course_id: str) -> list[Enrollment]:
        try:
            rows = await self._enrollments.list_for_course(course_id)
        except Exception as e:
            logger.exception(
                "Enrollments for course could not be loaded",
                extra={"course_id": course_id, "operation": "instructor"},
            )
            raise PersistenceError("enrollment store rejected the query") from e
        return normalize_all("enrollment", rows, normalize_enrollment)

    async def instructor_payments(self, instructor_id: str) -> list[Payment]:
        try:
            rows = await self._payments.list_for_instructor(instructor_id)
        except Exception as e:
            logger.exception(
                "Payments for instructor %s could not be loaded",
                instructor_id,
                extra={"operation": "instructor"},
            )
            raise PersistenceError("payment store rejected the query") from e
        return normalize_all(
            "payment", rows, lambda r: normalize_payment(r, self._settings)
        )

    async def revenue_summary(self, instructor_id: str) -> RevenueSummary:
        return summarize_revenue(await self.instructor_payments(instructor_id))
