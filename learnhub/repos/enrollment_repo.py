from __future__ import annotations

from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4


class EnrollmentRepo(Protocol):
    async def create(
        self, user_id: str, course_id: str, payment_id: str, amount_paid: float
    ) -> dict: ...
    async def update_progress(
        self, enrollment_id: str, progress: int, completed_lessons: list[str]
    ) -> dict: ...
    async def list_for_user(self, user_id: str) -> list[dict]: ...
    async def list_for_course(self, course_id: str) -> list[dict]: ...


class InMemoryEnrollmentRepo:
    def __init__(self) -> None:
        self._by_id: dict[str, dict] = {}

    async def create(
        self, user_id: str, course_id: str, payment_id: str, amount_paid: float
    ) -> dict:
        # Same uniqueness the enrollments table enforces.
        if any(
            r["user_id"] == user_id and r["course_id"] == course_id
            for r in self._by_id.values()
        ):
            raise ValueError("enrollment already exists")

        now = datetime.now(UTC).isoformat()
        row = {
            "id": str(uuid4()),
            "user_id": user_id,
            "course_id": course_id,
            "progress": 0,
            "completed_lessons": [],
            "enrolled_at": now,
            "last_accessed_at": now,
            "certificate_issued": False,
            "payment_id": payment_id,
            "amount_paid": amount_paid,
            "total_time_spent": 0,
        }
        self._by_id[row["id"]] = row
        return dict(row)

    async def update_progress(
        self, enrollment_id: str, progress: int, completed_lessons: list[str]
    ) -> dict:
        row = self._by_id.get(enrollment_id)
        if row is None:
            raise KeyError("enrollment not found")

        row.update(
            progress=progress,
            completed_lessons=list(completed_lessons),
            last_accessed_at=datetime.now(UTC).isoformat(),
        )
        return dict(row)

    async def list_for_user(self, user_id: str) -> list[dict]:
        rows = [dict(r) for r in self._by_id.values() if r["user_id"] == user_id]
        return sorted(rows, key=lambda r: r["enrolled_at"], reverse=True)

    async def list_for_course(self, course_id: str) -> list[dict]:
        rows = [dict(r) for r in self._by_id.values() if r["course_id"] == course_id]
        return sorted(rows, key=lambda r: r["enrolled_at"], reverse=True)
