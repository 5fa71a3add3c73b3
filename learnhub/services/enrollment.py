"""Enrollment Workflow.

enroll_in_course:
  resolve course -> check payment -> check duplicate
  -> EnrollmentRepo.create
  -> on success: append enrollment, bump total_students, drop from cart,
     emit first_enrollment
  -> on failure: raise PersistenceError, local state untouched

Calls for the same (user_id, course_id) are serialized by a KeyedGuard, so
a second concurrent call sees the first one's enrollment and is rejected
locally instead of racing it to the store.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from learnhub.core.metrics import ENROLLMENTS
from learnhub.models.achievement import AchievementEvent
from learnhub.models.course import Course
from learnhub.models.enrollment import Enrollment
from learnhub.models.payment import Payment
from learnhub.repos.enrollment_repo import EnrollmentRepo
from learnhub.services.achievements import AchievementPublisher
from learnhub.services.cart import CartManager
from learnhub.services.errors import (
    AlreadyEnrolledError,
    CourseNotFoundError,
    PaymentMismatchError,
    PaymentNotCompletedError,
    PersistenceError,
)
from learnhub.services.guard import KeyedGuard
from learnhub.services.normalizer import normalize_enrollment
from learnhub.services.state import EngineState

logger = logging.getLogger(__name__)


class EnrollmentWorkflow:
    def __init__(
        self,
        state: EngineState,
        enrollments: EnrollmentRepo,
        cart: CartManager,
        achievements: AchievementPublisher,
        guard: KeyedGuard | None = None,
    ) -> None:
        self._state = state
        self._enrollments = enrollments
        self._cart = cart
        self._achievements = achievements
        self._guard = guard or KeyedGuard()

    async def enroll_in_course(
        self, course_id: str, user_id: str, payment: Payment
    ) -> Enrollment:
        async with self._guard.hold((user_id, course_id)):
            return await self._enroll(course_id, user_id, payment)

    async def _enroll(
        self, course_id: str, user_id: str, payment: Payment
    ) -> Enrollment:
        ctx = {"user_id": user_id, "course_id": course_id, "operation": "enroll"}

        if self._state.get_course(course_id) is None:
            ENROLLMENTS.labels(outcome="course_not_found").inc()
            logger.warning("Enrollment rejected: course not found", extra=ctx)
            raise CourseNotFoundError(course_id)

        if not payment.is_completed:
            ENROLLMENTS.labels(outcome="payment_not_completed").inc()
            logger.warning(
                "Enrollment rejected: payment %s is %s",
                payment.id,
                payment.status,
                extra=ctx,
            )
            raise PaymentNotCompletedError(payment.id, payment.status)

        if payment.course_id != course_id or payment.user_id != user_id:
            ENROLLMENTS.labels(outcome="payment_mismatch").inc()
            logger.warning(
                "Enrollment rejected: payment %s belongs to user=%s course=%s",
                payment.id,
                payment.user_id,
                payment.course_id,
                extra=ctx,
            )
            raise PaymentMismatchError(
                f"payment {payment.id} does not cover this user and course"
            )

        if self.is_enrolled(course_id, user_id):
            ENROLLMENTS.labels(outcome="already_enrolled").inc()
            logger.warning("Enrollment rejected: already enrolled", extra=ctx)
            raise AlreadyEnrolledError(user_id, course_id)

        try:
            raw = await self._enrollments.create(
                user_id, course_id, payment.id, payment.amount
            )
            enrollment = normalize_enrollment(raw)
        except Exception as e:
            ENROLLMENTS.labels(outcome="persistence_failed").inc()
            logger.exception("Enrollment could not be persisted", extra=ctx)
            raise PersistenceError(f"could not create enrollment: {e}") from e

        # Nothing below can fail, so local state changes all-or-nothing with
        # the store call above.
        self._state.add_enrollment(enrollment)
        self._state.update_course(
            course_id, lambda c: replace(c, total_students=c.total_students + 1)
        )
        self._cart.remove_from_cart(course_id)
        self._achievements.emit(AchievementEvent(user_id, "first_enrollment"))

        ENROLLMENTS.labels(outcome="created").inc()
        logger.info(
            "Enrolled via payment %s",
            payment.id,
            extra={**ctx, "enrollment_id": enrollment.id},
        )
        return enrollment

    def is_enrolled(self, course_id: str, user_id: str) -> bool:
        return self._state.find_enrollment(course_id, user_id) is not None

    def get_enrollment(self, course_id: str, user_id: str) -> Enrollment | None:
        return self._state.find_enrollment(course_id, user_id)

    def get_enrolled_courses(self, user_id: str) -> list[Course]:
        courses = []
        for enrollment in self._state.enrollments_for(user_id):
            course = self._state.get_course(enrollment.course_id)
            if course is not None:
                courses.append(course)
        return courses
