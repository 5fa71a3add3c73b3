"""Map raw collaborator rows onto domain dataclasses.

Collaborators return snake_case dicts shaped like their storage rows, with
any optional column possibly missing or null.  Every function here fills
the documented default for an absent field so the engine never has to
special-case a partial record.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar

from learnhub.core.config import SETTINGS, Settings
from learnhub.models.certificate import Certificate
from learnhub.models.course import Course, Instructor
from learnhub.models.enrollment import Enrollment
from learnhub.models.payment import PAYMENT_METHODS, PAYMENT_STATUSES, Payment
from learnhub.services.errors import NormalizationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_LEVELS = ("Beginner", "Intermediate", "Advanced")

UNKNOWN_INSTRUCTOR = Instructor(id="", name="Unknown Instructor")


def _require_id(raw: Mapping[str, Any], kind: str) -> str:
    value = raw.get("id")
    if value is None or str(value) == "":
        raise NormalizationError(f"{kind} record has no id")
    return str(value)


def _num(raw: Mapping[str, Any], key: str) -> float:
    value = raw.get(key)
    if value is None:
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise NormalizationError(f"{key} must be numeric (got {value!r})") from None
    if not math.isfinite(number):
        raise NormalizationError(f"{key} must be finite (got {value!r})")
    return number


def _opt_num(raw: Mapping[str, Any], key: str) -> float | None:
    return None if raw.get(key) is None else _num(raw, key)


def _int(raw: Mapping[str, Any], key: str) -> int:
    return int(_num(raw, key))


def _str(raw: Mapping[str, Any], key: str, default: str = "") -> str:
    value = raw.get(key)
    return default if value is None else str(value)


def _opt_str(raw: Mapping[str, Any], key: str) -> str | None:
    value = raw.get(key)
    return None if value is None else str(value)


def _strings(raw: Mapping[str, Any], key: str) -> tuple[str, ...]:
    return tuple(str(v) for v in raw.get(key) or ())


def _bool(raw: Mapping[str, Any], key: str, default: bool = False) -> bool:
    value = raw.get(key)
    return default if value is None else bool(value)


def _instructor(raw: Mapping[str, Any]) -> Instructor:
    nested = raw.get("instructor")
    if isinstance(nested, Mapping):
        return Instructor(
            id=_str(nested, "id"),
            name=_str(nested, "name", UNKNOWN_INSTRUCTOR.name),
            avatar=_opt_str(nested, "avatar"),
            bio=_opt_str(nested, "bio"),
        )
    if raw.get("instructor_id") is not None:
        return Instructor(
            id=str(raw["instructor_id"]),
            name=_str(raw, "instructor_name", UNKNOWN_INSTRUCTOR.name),
        )
    return UNKNOWN_INSTRUCTOR


def normalize_course(
    raw: Mapping[str, Any], settings: Settings = SETTINGS
) -> Course:
    level = _str(raw, "level", "Beginner")
    if level not in _LEVELS:
        level = "Beginner"

    return Course(
        id=_require_id(raw, "course"),
        title=_str(raw, "title"),
        instructor=_instructor(raw),
        thumbnail=_str(raw, "thumbnail") or settings.placeholder_thumbnail,
        category=_str(raw, "category"),
        description=_str(raw, "description"),
        short_description=_str(raw, "short_description"),
        price=_num(raw, "price"),
        original_price=_opt_num(raw, "original_price"),
        rating=_num(raw, "rating"),
        total_ratings=_int(raw, "total_ratings"),
        total_students=_int(raw, "total_students"),
        duration=_str(raw, "duration") or "0h",
        level=level,  # type: ignore[arg-type]
        language=_str(raw, "language") or "English",
        tags=_strings(raw, "tags"),
        requirements=_strings(raw, "requirements"),
        what_you_will_learn=_strings(raw, "what_you_will_learn"),
        target_audience=_strings(raw, "target_audience"),
        has_subtitles=_bool(raw, "has_subtitles"),
        has_certificate=_bool(raw, "has_certificate", default=True),
        total_lessons=_int(raw, "total_lessons"),
        total_quizzes=_int(raw, "total_quizzes"),
        total_assignments=_int(raw, "total_assignments"),
        is_published=_bool(raw, "is_published"),
        is_draft=_bool(raw, "is_draft"),
        is_approved=_bool(raw, "is_approved"),
        rejection_reason=_opt_str(raw, "rejection_reason"),
        revenue=_num(raw, "revenue"),
        created_at=_opt_str(raw, "created_at"),
        updated_at=_opt_str(raw, "updated_at"),
    )


def normalize_enrollment(raw: Mapping[str, Any]) -> Enrollment:
    lessons = _strings(raw, "completed_lessons")
    # Stored arrays may carry duplicates; keep the first occurrence only.
    lessons = tuple(dict.fromkeys(lessons))

    progress = round(_num(raw, "progress"))

    return Enrollment(
        id=_require_id(raw, "enrollment"),
        user_id=_str(raw, "user_id"),
        course_id=_str(raw, "course_id"),
        progress=max(0, min(100, progress)),
        completed_lessons=lessons,
        enrolled_at=_opt_str(raw, "enrolled_at"),
        last_accessed_at=_opt_str(raw, "last_accessed_at"),
        certificate_issued=_bool(raw, "certificate_issued"),
        certificate_id=_opt_str(raw, "certificate_id"),
        payment_id=_opt_str(raw, "payment_id"),
        amount_paid=_num(raw, "amount_paid"),
        total_time_spent=_int(raw, "total_time_spent"),
    )


def normalize_certificate(raw: Mapping[str, Any]) -> Certificate:
    cert_id = _require_id(raw, "certificate")
    issued_at = _str(raw, "issued_at")
    return Certificate(
        id=cert_id,
        user_id=_str(raw, "user_id"),
        course_id=_str(raw, "course_id"),
        course_name=_str(raw, "course_name"),
        instructor_name=_str(raw, "instructor_name"),
        issued_at=issued_at,
        completion_date=_str(raw, "completion_date") or issued_at,
        verification_code=_str(raw, "verification_code"),
        certificate_url=(
            _str(raw, "certificate_url") or f"/certificates/{cert_id}.pdf"
        ),
        grade=_str(raw, "grade") or "A",
    )


def normalize_payment(
    raw: Mapping[str, Any], settings: Settings = SETTINGS
) -> Payment:
    amount = _num(raw, "amount")

    if raw.get("platform_fee") is None:
        platform_fee = round(amount * settings.platform_fee_rate, 2)
    else:
        platform_fee = _num(raw, "platform_fee")
    if raw.get("instructor_earnings") is None:
        instructor_earnings = round(amount - platform_fee, 2)
    else:
        instructor_earnings = _num(raw, "instructor_earnings")

    status = _str(raw, "status", "pending")
    if status not in PAYMENT_STATUSES:
        raise NormalizationError(f"unknown payment status {status!r}")
    method = _str(raw, "payment_method", "card")
    if method not in PAYMENT_METHODS:
        method = "card"

    return Payment(
        id=_require_id(raw, "payment"),
        user_id=_str(raw, "user_id"),
        course_id=_str(raw, "course_id"),
        amount=amount,
        platform_fee=platform_fee,
        instructor_earnings=instructor_earnings,
        payment_method=method,  # type: ignore[arg-type]
        status=status,  # type: ignore[arg-type]
        transaction_id=_str(raw, "transaction_id"),
        created_at=_str(raw, "created_at"),
        processed_at=_opt_str(raw, "processed_at"),
    )


def normalize_all(
    kind: str, rows: Iterable[Mapping[str, Any]], normalize: Callable[[Any], T]
) -> list[T]:
    """Normalize rows, dropping (and logging) any the normalizer rejects."""
    out: list[T] = []
    for row in rows:
        try:
            out.append(normalize(row))
        except NormalizationError as e:
            logger.warning("Dropping malformed %s record: %s", kind, e)
    return out
