"""PostgreSQL implementations of the collaborator protocols.

Each repo opens one session per call from the injected session factory
and commits on success (``session.begin()`` rolls back on exception).
Rows come back as the raw dict shape the normalizer expects, with
timestamps rendered as ISO-8601 strings.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from learnhub.core.config import SETTINGS
from learnhub.db.tables import (
    AchievementRow,
    CertificateRow,
    CourseRow,
    EnrollmentRow,
    PaymentRow,
)
from learnhub.models.achievement import ACHIEVEMENT_POINTS
from learnhub.repos.payment_repo import new_transaction_id


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


class PgCourseDirectory:
    """Satisfies the CourseDirectory Protocol."""

    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def list_published_courses(self) -> list[dict]:
        stmt = (
            select(CourseRow)
            .where(CourseRow.is_published.is_(True), CourseRow.is_approved.is_(True))
            .order_by(CourseRow.created_at.desc())
        )
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_course_to_raw(r) for r in rows]


class PgEnrollmentRepo:
    """Satisfies the EnrollmentRepo Protocol."""

    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def create(
        self, user_id: str, course_id: str, payment_id: str, amount_paid: float
    ) -> dict:
        async with self._sessions() as session, session.begin():
            row = EnrollmentRow(
                user_id=user_id,
                course_id=course_id,
                payment_id=payment_id,
                amount_paid=amount_paid,
                progress=0,
                completed_lessons=[],
            )
            session.add(row)
            # Keeps the durable student counter in step with the local one.
            await session.execute(
                update(CourseRow)
                .where(CourseRow.id == course_id)
                .values(total_students=CourseRow.total_students + 1)
            )
            await session.flush()
            await session.refresh(row)
            return _enrollment_to_raw(row)

    async def update_progress(
        self, enrollment_id: str, progress: int, completed_lessons: list[str]
    ) -> dict:
        async with self._sessions() as session, session.begin():
            row = await session.get(EnrollmentRow, enrollment_id)
            if row is None:
                raise KeyError("enrollment not found")
            row.progress = progress
            row.completed_lessons = list(completed_lessons)
            row.last_accessed_at = datetime.now(UTC)
            await session.flush()
            return _enrollment_to_raw(row)

    async def list_for_user(self, user_id: str) -> list[dict]:
        stmt = (
            select(EnrollmentRow)
            .where(EnrollmentRow.user_id == user_id)
            .order_by(EnrollmentRow.enrolled_at.desc())
        )
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_enrollment_to_raw(r) for r in rows]

    async def list_for_course(self, course_id: str) -> list[dict]:
        stmt = (
            select(EnrollmentRow)
            .where(EnrollmentRow.course_id == course_id)
            .order_by(EnrollmentRow.enrolled_at.desc())
        )
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_enrollment_to_raw(r) for r in rows]


class PgPaymentRepo:
    """Satisfies the PaymentRepo Protocol; computes the fee split server-side."""

    def __init__(
        self,
        sessions: async_sessionmaker[AsyncSession],
        platform_fee_rate: float = SETTINGS.platform_fee_rate,
    ) -> None:
        self._sessions = sessions
        self._rate = platform_fee_rate

    async def create(self, record: dict) -> dict:
        amount = record["amount"]
        course_id = record["course_id"]
        platform_fee = round(amount * self._rate, 2)
        async with self._sessions() as session, session.begin():
            row = PaymentRow(
                id=record["id"],
                user_id=record["user_id"],
                course_id=course_id,
                amount=amount,
                platform_fee=platform_fee,
                instructor_earnings=round(amount - platform_fee, 2),
                payment_method=record["payment_method"],
                status="completed",
                transaction_id=record.get("transaction_id") or new_transaction_id(),
                processed_at=datetime.now(UTC),
            )
            session.add(row)
            await session.execute(
                update(CourseRow)
                .where(CourseRow.id == course_id)
                .values(revenue=CourseRow.revenue + amount)
            )
            await session.flush()
            await session.refresh(row)
            return _payment_to_raw(row)

    async def list_for_user(self, user_id: str) -> list[dict]:
        stmt = (
            select(PaymentRow)
            .where(PaymentRow.user_id == user_id)
            .order_by(PaymentRow.created_at.desc())
        )
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_payment_to_raw(r) for r in rows]

    async def list_for_instructor(self, instructor_id: str) -> list[dict]:
        stmt = (
            select(PaymentRow)
            .join(CourseRow, CourseRow.id == PaymentRow.course_id)
            .where(CourseRow.instructor_id == instructor_id)
            .order_by(PaymentRow.created_at.desc())
        )
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_payment_to_raw(r) for r in rows]


class PgCertificateRepo:
    """Satisfies the CertificateRepo Protocol."""

    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def insert(self, record: dict) -> dict:
        completion = record.get("completion_date")
        cert_id = str(uuid4())
        async with self._sessions() as session, session.begin():
            row = CertificateRow(
                id=cert_id,
                user_id=record["user_id"],
                course_id=record["course_id"],
                course_name=record["course_name"],
                instructor_name=record["instructor_name"],
                grade=record.get("grade"),
                certificate_url=f"/certificates/{cert_id}.pdf",
                verification_code=record["verification_code"],
                completion_date=(
                    datetime.fromisoformat(completion)
                    if completion
                    else datetime.now(UTC)
                ),
            )
            session.add(row)
            await session.flush()
            await session.refresh(row)
            return _certificate_to_raw(row)

    async def list_for_user(self, user_id: str) -> list[dict]:
        stmt = (
            select(CertificateRow)
            .where(CertificateRow.user_id == user_id)
            .order_by(CertificateRow.issued_at)
        )
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_certificate_to_raw(r) for r in rows]


class PgAchievementSink:
    """Satisfies the AchievementSink Protocol; one row per (user, type)."""

    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def record(self, user_id: str, achievement_type: str) -> None:
        stmt = (
            pg_insert(AchievementRow)
            .values(
                id=str(uuid4()),
                user_id=user_id,
                type=achievement_type,
                points=ACHIEVEMENT_POINTS[achievement_type],
            )
            .on_conflict_do_nothing(index_elements=["user_id", "type"])
        )
        async with self._sessions() as session, session.begin():
            await session.execute(stmt)


# ---------------------------------------------------------------------------
# Row -> raw dict
# ---------------------------------------------------------------------------


def _course_to_raw(row: CourseRow) -> dict[str, Any]:
    return {
        "id": row.id,
        "title": row.title,
        "description": row.description,
        "short_description": row.short_description,
        "instructor_id": row.instructor_id,
        "instructor_name": row.instructor_name,
        "thumbnail": row.thumbnail,
        "price": row.price,
        "original_price": row.original_price,
        "rating": row.rating,
        "total_ratings": row.total_ratings,
        "total_students": row.total_students,
        "duration": row.duration,
        "level": row.level,
        "category": row.category,
        "tags": list(row.tags or []),
        "language": row.language,
        "has_subtitles": row.has_subtitles,
        "has_certificate": row.has_certificate,
        "total_lessons": row.total_lessons,
        "total_quizzes": row.total_quizzes,
        "total_assignments": row.total_assignments,
        "is_published": row.is_published,
        "is_draft": row.is_draft,
        "is_approved": row.is_approved,
        "rejection_reason": row.rejection_reason,
        "revenue": row.revenue,
        "created_at": _iso(row.created_at),
        "updated_at": _iso(row.updated_at),
    }


def _enrollment_to_raw(row: EnrollmentRow) -> dict[str, Any]:
    return {
        "id": row.id,
        "user_id": row.user_id,
        "course_id": row.course_id,
        "progress": row.progress,
        "completed_lessons": list(row.completed_lessons or []),
        "enrolled_at": _iso(row.enrolled_at),
        "last_accessed_at": _iso(row.last_accessed_at),
        "certificate_issued": row.certificate_issued,
        "certificate_id": row.certificate_id,
        "payment_id": row.payment_id,
        "amount_paid": row.amount_paid,
        "total_time_spent": row.total_time_spent,
    }


def _payment_to_raw(row: PaymentRow) -> dict[str, Any]:
    return {
        "id": row.id,
        "user_id": row.user_id,
        "course_id": row.course_id,
        "amount": row.amount,
        "platform_fee": row.platform_fee,
        "instructor_earnings": row.instructor_earnings,
        "payment_method": row.payment_method,
        "status": row.status,
        "transaction_id": row.transaction_id,
        "created_at": _iso(row.created_at),
        "processed_at": _iso(row.processed_at),
    }


def _certificate_to_raw(row: CertificateRow) -> dict[str, Any]:
    return {
        "id": row.id,
        "user_id": row.user_id,
        "course_id": row.course_id,
        "course_name": row.course_name,
        "instructor_name": row.instructor_name,
        "grade": row.grade,
        "certificate_url": row.certificate_url,
        "verification_code": row.verification_code,
        "issued_at": _iso(row.issued_at),
        "completion_date": _iso(row.completion_date),
    }
