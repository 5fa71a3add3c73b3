"""Engine error taxonomy.

NotFoundError            course or enrollment absent
PreconditionFailedError  workflow refused: payment incomplete, duplicate, ...
PersistenceError         a collaborator rejected the call (original on __cause__)
ValidationGapError       input the engine cannot accept
"""

from __future__ import annotations


class EngineError(Exception):
    pass


class NotFoundError(EngineError):
    pass


class CourseNotFoundError(NotFoundError):
    def __init__(self, course_id: str) -> None:
        super().__init__(f"course not found: {course_id}")
        self.course_id = course_id


class PreconditionFailedError(EngineError):
    pass


class PaymentNotCompletedError(PreconditionFailedError):
    def __init__(self, payment_id: str, status: str) -> None:
        super().__init__(f"payment {payment_id} is {status}, not completed")
        self.payment_id = payment_id
        self.status = status


class PaymentMismatchError(PreconditionFailedError):
    pass


class AlreadyEnrolledError(PreconditionFailedError):
    def __init__(self, user_id: str, course_id: str) -> None:
        super().__init__(f"user {user_id} already enrolled in course {course_id}")
        self.user_id = user_id
        self.course_id = course_id


class PersistenceError(EngineError):
    pass


class ValidationGapError(EngineError, ValueError):
    pass


class InvalidAmountError(ValidationGapError):
    pass


class InvalidPaymentMethodError(ValidationGapError):
    def __init__(self, method: str) -> None:
        super().__init__(f"unsupported payment method {method!r}")
        self.method = method


class NormalizationError(ValidationGapError):
    pass
