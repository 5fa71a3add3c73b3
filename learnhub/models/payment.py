from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

PaymentStatus = Literal["pending", "completed", "failed", "refunded"]
PaymentMethod = Literal["card", "paypal", "bank"]

PAYMENT_STATUSES: tuple[str, ...] = ("pending", "completed", "failed", "refunded")
PAYMENT_METHODS: tuple[str, ...] = ("card", "paypal", "bank")


@dataclass(frozen=True, slots=True)
class Payment:
    """A course purchase, split between platform and instructor.

    Invariant: platform_fee + instructor_earnings == amount.
    """

    id: str
    user_id: str
    course_id: str
    amount: float
    platform_fee: float
    instructor_earnings: float
    payment_method: PaymentMethod
    status: PaymentStatus
    transaction_id: str
    created_at: str
    processed_at: str | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"
