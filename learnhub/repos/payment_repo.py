from __future__ import annotations

import random
import string
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Protocol

from learnhub.core.config import SETTINGS

_BASE36 = string.digits + string.ascii_lowercase


def new_transaction_id() -> str:
    """``txn_<epoch-ms>_<9 base36 chars>``, the format the payment store uses."""
    suffix = "".join(random.choices(_BASE36, k=9))
    return f"txn_{int(time.time() * 1000)}_{suffix}"


class PaymentRepo(Protocol):
    async def create(self, record: dict) -> dict: ...
    async def list_for_user(self, user_id: str) -> list[dict]: ...
    async def list_for_instructor(self, instructor_id: str) -> list[dict]: ...


class InMemoryPaymentRepo:
    """Mirrors the server-side payment insert: fee split computed here too.

    ``record`` carries the caller's ``id`` and ``transaction_id`` so the
    stored row keeps the identity the enrollment already references.
    ``instructor_of`` resolves a course id to its instructor for the
    revenue view, where the SQL store joins against the courses table.
    """

    def __init__(
        self,
        platform_fee_rate: float = SETTINGS.platform_fee_rate,
        instructor_of: Callable[[str], str | None] | None = None,
    ) -> None:
        self._rate = platform_fee_rate
        self._instructor_of = instructor_of or (lambda course_id: None)
        self._rows: list[dict] = []

    async def create(self, record: dict) -> dict:
        amount = record["amount"]
        platform_fee = round(amount * self._rate, 2)
        now = datetime.now(UTC).isoformat()
        row = {
            "id": record["id"],
            "user_id": record["user_id"],
            "course_id": record["course_id"],
            "amount": amount,
            "platform_fee": platform_fee,
            "instructor_earnings": round(amount - platform_fee, 2),
            "payment_method": record["payment_method"],
            "status": "completed",
            "transaction_id": record.get("transaction_id") or new_transaction_id(),
            "created_at": now,
            "processed_at": now,
        }
        self._rows.append(row)
        return dict(row)

    async def list_for_user(self, user_id: str) -> list[dict]:
        return [dict(r) for r in reversed(self._rows) if r["user_id"] == user_id]

    async def list_for_instructor(self, instructor_id: str) -> list[dict]:
        return [
            dict(r)
            for r in reversed(self._rows)
            if self._instructor_of(r["course_id"]) == instructor_id
        ]
