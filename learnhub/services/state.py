"""Session state container.

One instance per engine session.  Holds the local cache of courses, cart,
enrollments, certificates and payments.  Services read and write through
these methods only; nothing here talks to a collaborator.

Domain objects are frozen, so every update swaps in a ``dataclasses.replace``
copy at the same position.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from learnhub.models.cart import CartItem
from learnhub.models.certificate import Certificate
from learnhub.models.course import Course
from learnhub.models.enrollment import Enrollment
from learnhub.models.payment import Payment


@dataclass
class EngineState:
    courses: list[Course] = field(default_factory=list)
    cart: list[CartItem] = field(default_factory=list)
    enrollments: list[Enrollment] = field(default_factory=list)
    certificates: list[Certificate] = field(default_factory=list)
    payments: list[Payment] = field(default_factory=list)

    # ---- courses ----

    def get_course(self, course_id: str) -> Course | None:
        return next((c for c in self.courses if c.id == course_id), None)

    def replace_courses(self, courses: Iterable[Course]) -> None:
        self.courses = list(courses)

    def update_course(
        self, course_id: str, change: Callable[[Course], Course]
    ) -> Course | None:
        for i, course in enumerate(self.courses):
            if course.id == course_id:
                self.courses[i] = change(course)
                return self.courses[i]
        return None

    # ---- enrollments ----

    def find_enrollment(self, course_id: str, user_id: str) -> Enrollment | None:
        return next(
            (
                e
                for e in self.enrollments
                if e.course_id == course_id and e.user_id == user_id
            ),
            None,
        )

    def enrollments_for(self, user_id: str) -> list[Enrollment]:
        return [e for e in self.enrollments if e.user_id == user_id]

    def add_enrollment(self, enrollment: Enrollment) -> None:
        self.enrollments.append(enrollment)

    def put_enrollment(self, enrollment: Enrollment) -> None:
        """Replace the stored enrollment with the same id (or append)."""
        for i, existing in enumerate(self.enrollments):
            if existing.id == enrollment.id:
                self.enrollments[i] = enrollment
                return
        self.enrollments.append(enrollment)

    def replace_enrollments(self, enrollments: Iterable[Enrollment]) -> None:
        self.enrollments = list(enrollments)

    # ---- certificates ----

    def add_certificate(self, certificate: Certificate) -> None:
        self.certificates.append(certificate)

    def get_certificate(self, certificate_id: str) -> Certificate | None:
        return next((c for c in self.certificates if c.id == certificate_id), None)

    def has_verification_code(self, code: str) -> bool:
        return any(c.verification_code == code for c in self.certificates)

    def replace_certificates(self, certificates: Iterable[Certificate]) -> None:
        self.certificates = list(certificates)

    # ---- payments ----

    def add_payment(self, payment: Payment) -> None:
        self.payments.append(payment)

    def get_payment(self, payment_id: str) -> Payment | None:
        return next((p for p in self.payments if p.id == payment_id), None)

    def replace_payments(self, payments: Iterable[Payment]) -> None:
        self.payments = list(payments)
