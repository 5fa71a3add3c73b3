"""Payment Calculator.

Settlement is synchronous in this design: the returned Payment is already
``completed``.  The durable copy is written by the payment store, which
repeats the same split server-side; that call runs in the background and
its failure never reaches the caller.  The stored row keeps the id and
transaction id issued here, so enrollments that reference the payment
stay valid after a reload; ``wait_persisted`` lets the enrollment write
wait for that row.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from datetime import UTC, datetime
from uuid import uuid4

from learnhub.core.config import SETTINGS, Settings
from learnhub.core.metrics import PAYMENTS
from learnhub.models.payment import PAYMENT_METHODS, Payment
from learnhub.repos.payment_repo import PaymentRepo, new_transaction_id
from learnhub.services.background import BackgroundRunner
from learnhub.services.errors import InvalidAmountError, InvalidPaymentMethodError
from learnhub.services.state import EngineState

logger = logging.getLogger(__name__)


def split_amount(amount: float, platform_fee_rate: float) -> tuple[float, float]:
    """Return (platform_fee, instructor_earnings); the two always sum to amount."""
    platform_fee = round(amount * platform_fee_rate, 2)
    return platform_fee, round(amount - platform_fee, 2)


class PaymentCalculator:
    def __init__(
        self,
        state: EngineState,
        payments: PaymentRepo,
        runner: BackgroundRunner,
        settings: Settings = SETTINGS,
    ) -> None:
        self._state = state
        self._payments = payments
        self._runner = runner
        self._settings = settings
        self._persisting: dict[str, asyncio.Task[None]] = {}

    def process_payment(
        self, course_id: str, user_id: str, amount: float, method: str
    ) -> Payment:
        if amount < 0:
            PAYMENTS.labels(outcome="rejected").inc()
            raise InvalidAmountError(f"payment amount must be >= 0 (got {amount!r})")
        if method not in PAYMENT_METHODS:
            PAYMENTS.labels(outcome="rejected").inc()
            raise InvalidPaymentMethodError(method)

        platform_fee, instructor_earnings = split_amount(
            amount, self._settings.platform_fee_rate
        )
        now = datetime.now(UTC).isoformat()
        payment = Payment(
            id=f"pay_{uuid4().hex}",
            user_id=user_id,
            course_id=course_id,
            amount=amount,
            platform_fee=platform_fee,
            instructor_earnings=instructor_earnings,
            payment_method=method,  # type: ignore[arg-type]
            status="completed",
            transaction_id=new_transaction_id(),
            created_at=now,
            processed_at=now,
        )

        self._state.add_payment(payment)
        self._state.update_course(
            course_id, lambda c: replace(c, revenue=c.revenue + amount)
        )
        PAYMENTS.labels(outcome="completed").inc()
        logger.info(
            "Payment %s completed: amount=%.2f platform_fee=%.2f instructor=%.2f",
            payment.id,
            amount,
            platform_fee,
            instructor_earnings,
            extra={"user_id": user_id, "course_id": course_id, "operation": "payment"},
        )

        task = self._runner.spawn(self._persist(payment))
        self._persisting[payment.id] = task
        task.add_done_callback(lambda _: self._persisting.pop(payment.id, None))
        return payment

    async def wait_persisted(self, payment_id: str) -> None:
        """Wait until the store write for ``payment_id`` has finished, if pending."""
        task = self._persisting.get(payment_id)
        if task is not None:
            await asyncio.shield(task)

    async def _persist(self, payment: Payment) -> None:
        try:
            await self._payments.create(
                {
                    "id": payment.id,
                    "user_id": payment.user_id,
                    "course_id": payment.course_id,
                    "amount": payment.amount,
                    "payment_method": payment.payment_method,
                    "transaction_id": payment.transaction_id,
                }
            )
        except Exception:
            PAYMENTS.labels(outcome="persist_failed").inc()
            logger.exception(
                "Payment %s could not be mirrored to the payment store",
                payment.id,
                extra={
                    "user_id": payment.user_id,
                    "course_id": payment.course_id,
                    "operation": "payment",
                },
            )
            return
        PAYMENTS.labels(outcome="persist_ok").inc()
