"""Response models shared by the routers.

Each ``from_*`` builder maps a frozen domain dataclass to its wire shape.
"""

from __future__ import annotations

from pydantic import BaseModel

from learnhub.models.cart import CartItem
from learnhub.models.certificate import Certificate
from learnhub.models.course import Course
from learnhub.models.enrollment import Enrollment
from learnhub.models.payment import Payment


class CourseOut(BaseModel):
    id: str
    title: str
    instructor_id: str
    instructor_name: str
    thumbnail: str
    category: str
    price: float
    level: str
    language: str
    duration: str
    total_lessons: int
    total_students: int
    has_certificate: bool
    moderation_state: str
    rejection_reason: str | None = None

    @classmethod
    def from_course(cls, course: Course) -> CourseOut:
        return cls(
            id=course.id,
            title=course.title,
            instructor_id=course.instructor.id,
            instructor_name=course.instructor.name,
            thumbnail=course.thumbnail,
            category=course.category,
            price=course.price,
            level=course.level,
            language=course.language,
            duration=course.duration,
            total_lessons=course.total_lessons,
            total_students=course.total_students,
            has_certificate=course.has_certificate,
            moderation_state=course.moderation_state,
            rejection_reason=course.rejection_reason,
        )


class CartItemOut(BaseModel):
    course_id: str
    title: str
    price: float

    @classmethod
    def from_item(cls, item: CartItem) -> CartItemOut:
        return cls(
            course_id=item.course_id,
            title=item.course.title,
            price=item.course.price,
        )


class CartOut(BaseModel):
    items: list[CartItemOut]
    total: float


class PaymentOut(BaseModel):
    id: str
    amount: float
    platform_fee: float
    instructor_earnings: float
    payment_method: str
    status: str
    transaction_id: str

    @classmethod
    def from_payment(cls, payment: Payment) -> PaymentOut:
        return cls(
            id=payment.id,
            amount=payment.amount,
            platform_fee=payment.platform_fee,
            instructor_earnings=payment.instructor_earnings,
            payment_method=payment.payment_method,
            status=payment.status,
            transaction_id=payment.transaction_id,
        )


class EnrollmentOut(BaseModel):
    id: str
    user_id: str
    course_id: str
    progress: int
    completed_lessons: list[str]
    certificate_issued: bool
    certificate_id: str | None = None
    enrolled_at: str | None = None
    last_accessed_at: str | None = None

    @classmethod
    def from_enrollment(cls, enrollment: Enrollment) -> EnrollmentOut:
        return cls(
            id=enrollment.id,
            user_id=enrollment.user_id,
            course_id=enrollment.course_id,
            progress=enrollment.progress,
            completed_lessons=list(enrollment.completed_lessons),
            certificate_issued=enrollment.certificate_issued,
            certificate_id=enrollment.certificate_id,
            enrolled_at=enrollment.enrolled_at,
            last_accessed_at=enrollment.last_accessed_at,
        )


class CertificateOut(BaseModel):
    id: str
    course_id: str
    course_name: str
    instructor_name: str
    verification_code: str
    certificate_url: str
    grade: str
    issued_at: str
    completion_date: str

    @classmethod
    def from_certificate(cls, cert: Certificate) -> CertificateOut:
        return cls(
            id=cert.id,
            course_id=cert.course_id,
            course_name=cert.course_name,
            instructor_name=cert.instructor_name,
            verification_code=cert.verification_code,
            certificate_url=cert.certificate_url,
            grade=cert.grade,
            issued_at=cert.issued_at,
            completion_date=cert.completion_date,
        )


class RevenueOut(BaseModel):
    total_revenue: float
    platform_fees: float
    instructor_earnings: float
    payment_count: int
    payments: list[PaymentOut]
