"""LearningEngine: one learner session over the workflow services.

Wires an EngineState to the collaborators and exposes every workflow
operation.  ``initialize()`` rebuilds the local cache from the
collaborators; a failed load leaves that collection empty and is logged,
it never aborts startup.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from learnhub.core.config import SETTINGS, Settings
from learnhub.models.cart import CartItem
from learnhub.models.certificate import Certificate
from learnhub.models.course import Course
from learnhub.models.enrollment import Enrollment
from learnhub.models.payment import Payment
from learnhub.models.principal import Principal
from learnhub.repos.certificate_repo import CertificateRepo
from learnhub.repos.course_directory import CourseDirectory
from learnhub.repos.enrollment_repo import EnrollmentRepo
from learnhub.repos.payment_repo import PaymentRepo
from learnhub.services.achievements import AchievementPublisher, AchievementSink
from learnhub.services.background import BackgroundRunner
from learnhub.services.cart import CartManager
from learnhub.services.catalog import search_courses
from learnhub.services.certificates import CertificateIssuer, Clock, utcnow
from learnhub.services.enrollment import EnrollmentWorkflow
from learnhub.services.guard import KeyedGuard
from learnhub.services.identity import IdentityService
from learnhub.services.instructor import InstructorDesk, RevenueSummary
from learnhub.services.moderation import ModerationStateMachine
from learnhub.services.normalizer import (
    normalize_all,
    normalize_certificate,
    normalize_course,
    normalize_enrollment,
    normalize_payment,
)
from learnhub.services.payments import PaymentCalculator
from learnhub.services.progress import ProgressTracker
from learnhub.services.state import EngineState

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LearningEngine:
    def __init__(
        self,
        *,
        courses: CourseDirectory,
        enrollments: EnrollmentRepo,
        payments: PaymentRepo,
        certificates: CertificateRepo,
        achievements: AchievementSink,
        identity: IdentityService,
        settings: Settings = SETTINGS,
        state: EngineState | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self.state = state or EngineState()
        self.settings = settings
        self._course_directory = courses
        self._enrollment_repo = enrollments
        self._payment_repo = payments
        self._certificate_repo = certificates
        self._identity = identity
        self._runner = BackgroundRunner()
        self.user: Principal | None = None
        self.ready = False

        publisher = AchievementPublisher(achievements, self._runner)
        # One lock per (user, course) across every workflow that rewrites
        # the enrollment.
        guard = KeyedGuard()
        self.cart = CartManager(self.state)
        self.payments = PaymentCalculator(
            self.state, payments, self._runner, settings
        )
        self.enrollment = EnrollmentWorkflow(
            self.state, enrollments, self.cart, publisher, guard
        )
        self.progress = ProgressTracker(self.state, enrollments, publisher, guard)
        self.certificates = CertificateIssuer(
            self.state, certificates, publisher, settings, clock, guard
        )
        self.moderation = ModerationStateMachine(self.state)
        self.instructor = InstructorDesk(enrollments, payments, settings)

    # ---- initialization ----

    async def initialize(self) -> None:
        raw_courses = await self._load(
            "courses", self._course_directory.list_published_courses
        )
        self.state.replace_courses(
            normalize_all(
                "course", raw_courses, lambda r: normalize_course(r, self.settings)
            )
        )

        try:
            self.user = await self._identity.current_user()
        except Exception:
            logger.exception("Identity lookup failed; starting anonymous session")
            self.user = None

        if self.user is not None:
            user_id = self.user.user_id
            raw_enrollments = await self._load(
                "enrollments", lambda: self._enrollment_repo.list_for_user(user_id)
            )
            raw_certificates = await self._load(
                "certificates", lambda: self._certificate_repo.list_for_user(user_id)
            )
            raw_payments = await self._load(
                "payments", lambda: self._payment_repo.list_for_user(user_id)
            )
            self.state.replace_enrollments(
                normalize_all("enrollment", raw_enrollments, normalize_enrollment)
            )
            self.state.replace_certificates(
                normalize_all("certificate", raw_certificates, normalize_certificate)
            )
            self.state.replace_payments(
                normalize_all(
                    "payment",
                    raw_payments,
                    lambda r: normalize_payment(r, self.settings),
                )
            )

        self.ready = True
        logger.info(
            "Engine ready: courses=%d enrollments=%d certificates=%d payments=%d",
            len(self.state.courses),
            len(self.state.enrollments),
            len(self.state.certificates),
            len(self.state.payments),
            extra={"user_id": self.user.user_id if self.user else None},
        )

    async def _load(
        self, name: str, fetch: Callable[[], Awaitable[list[T]]]
    ) -> list[T]:
        try:
            return await fetch()
        except Exception:
            logger.exception("Initial load of %s failed; starting empty", name)
            return []

    async def drain(self) -> None:
        """Wait for background persistence and achievement deliveries."""
        await self._runner.drain()

    # ---- catalogue ----

    def search_courses(
        self,
        query: str = "",
        *,
        category: str | None = None,
        level: str | None = None,
        min_price: float | None = None,
        max_price: float | None = None,
    ) -> list[Course]:
        return search_courses(
            self.state.courses,
            query,
            category=category,
            level=level,
            min_price=min_price,
            max_price=max_price,
        )

    # ---- cart ----

    def add_to_cart(self, course: Course) -> None:
        self.cart.add_to_cart(course)

    def remove_from_cart(self, course_id: str) -> None:
        self.cart.remove_from_cart(course_id)

    def clear_cart(self) -> None:
        self.cart.clear_cart()

    def cart_items(self) -> list[CartItem]:
        return self.cart.items()

    # ---- payments & enrollment ----

    def process_payment(
        self, course_id: str, user_id: str, amount: float, method: str
    ) -> Payment:
        return self.payments.process_payment(course_id, user_id, amount, method)

    async def enroll_in_course(
        self, course_id: str, user_id: str, payment: Payment
    ) -> Enrollment:
        # The enrollment row references the payment row; let that write land.
        await self.payments.wait_persisted(payment.id)
        return await self.enrollment.enroll_in_course(course_id, user_id, payment)

    def is_enrolled(self, course_id: str, user_id: str) -> bool:
        return self.enrollment.is_enrolled(course_id, user_id)

    def get_enrollment(self, course_id: str, user_id: str) -> Enrollment | None:
        return self.enrollment.get_enrollment(course_id, user_id)

    def get_enrolled_courses(self, user_id: str) -> list[Course]:
        return self.enrollment.get_enrolled_courses(user_id)

    # ---- progress & certificates ----

    async def update_progress(
        self, course_id: str, user_id: str, lesson_id: str
    ) -> Enrollment | None:
        return await self.progress.update_progress(course_id, user_id, lesson_id)

    async def complete_course(self, course_id: str, user_id: str) -> Certificate | None:
        return await self.certificates.complete_course(course_id, user_id)

    # ---- moderation ----

    def publish_course(self, course_id: str) -> Course | None:
        return self.moderation.publish_course(course_id)

    def approve_course(self, course_id: str) -> Course | None:
        return self.moderation.approve_course(course_id)

    def reject_course(self, course_id: str, reason: str) -> Course | None:
        return self.moderation.reject_course(course_id, reason)

    # ---- instructor ----

    async def course_students(self, course_id: str) -> list[Enrollment]:
        return await self.instructor.course_students(course_id)

    async def instructor_payments(self, instructor_id: str) -> list[Payment]:
        return await self.instructor.instructor_payments(instructor_id)

    async def revenue_summary(self, instructor_id: str) -> RevenueSummary:
        return await self.instructor.revenue_summary(instructor_id)
