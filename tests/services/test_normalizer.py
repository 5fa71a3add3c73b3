from __future__ import annotations

import pytest

from learnhub.core.config import DEFAULT_PLACEHOLDER_THUMBNAIL, SETTINGS
from learnhub.services.errors import NormalizationError
from learnhub.services.normalizer import (
    UNKNOWN_INSTRUCTOR,
    normalize_certificate,
    normalize_course,
    normalize_enrollment,
    normalize_payment,
)

# ---- courses ----


def test_course_defaults_for_missing_fields() -> None:
    course = normalize_course({"id": "c1", "title": "Intro"})
    assert course.thumbnail == DEFAULT_PLACEHOLDER_THUMBNAIL
    assert course.price == 0
    assert course.rating == 0
    assert course.total_lessons == 0
    assert course.level == "Beginner"
    assert course.language == "English"
    assert course.duration == "0h"
    assert course.has_certificate is True
    assert course.tags == ()
    assert course.instructor == UNKNOWN_INSTRUCTOR


def test_course_null_values_take_defaults() -> None:
    course = normalize_course(
        {"id": "c1", "title": "Intro", "thumbnail": None, "price": None, "level": None}
    )
    assert course.thumbnail == DEFAULT_PLACEHOLDER_THUMBNAIL
    assert course.price == 0
    assert course.level == "Beginner"


def test_course_unknown_level_falls_back_to_beginner() -> None:
    assert normalize_course({"id": "c1", "level": "Expert"}).level == "Beginner"


def test_course_instructor_from_nested_object() -> None:
    course = normalize_course(
        {"id": "c1", "instructor": {"id": "i1", "name": "Grace", "bio": "Navy"}}
    )
    assert course.instructor.id == "i1"
    assert course.instructor.name == "Grace"
    assert course.instructor.bio == "Navy"


def test_course_instructor_from_flat_columns() -> None:
    course = normalize_course(
        {"id": "c1", "instructor_id": 7, "instructor_name": "Lin"}
    )
    assert course.instructor.id == "7"
    assert course.instructor.name == "Lin"


def test_course_sequences_become_tuples() -> None:
    course = normalize_course({"id": "c1", "tags": ["a", "b"], "requirements": None})
    assert course.tags == ("a", "b")
    assert course.requirements == ()


def test_course_without_id_is_rejected() -> None:
    with pytest.raises(NormalizationError, match="course record has no id"):
        normalize_course({"title": "Nameless"})


def test_course_non_numeric_price_is_rejected() -> None:
    with pytest.raises(NormalizationError, match="price must be numeric"):
        normalize_course({"id": "c1", "price": "free"})


@pytest.mark.parametrize("value", ["n/a", [], {}])
def test_course_non_numeric_original_price_is_rejected(value) -> None:
    with pytest.raises(NormalizationError, match="original_price must be numeric"):
        normalize_course({"id": "c1", "original_price": value})


def test_course_original_price_is_optional() -> None:
    assert normalize_course({"id": "c1"}).original_price is None
    assert normalize_course({"id": "c1", "original_price": "79"}).original_price == 79.0


@pytest.mark.parametrize("value", [float("nan"), float("inf"), "-inf", "NaN"])
def test_course_non_finite_numbers_are_rejected(value) -> None:
    with pytest.raises(NormalizationError, match="must be finite"):
        normalize_course({"id": "c1", "total_lessons": value})


# ---- enrollments ----


def test_enrollment_dedupes_lessons_preserving_order() -> None:
    enrollment = normalize_enrollment(
        {"id": "e1", "completed_lessons": ["l2", "l1", "l2", "l3", "l1"]}
    )
    assert enrollment.completed_lessons == ("l2", "l1", "l3")


@pytest.mark.parametrize(("raw", "expected"), [(-5, 0), (140, 100), (49.6, 50)])
def test_enrollment_progress_is_clamped(raw: float, expected: int) -> None:
    assert normalize_enrollment({"id": "e1", "progress": raw}).progress == expected


def test_enrollment_nan_progress_is_rejected() -> None:
    with pytest.raises(NormalizationError, match="progress must be finite"):
        normalize_enrollment({"id": "e1", "progress": float("nan")})


def test_enrollment_defaults() -> None:
    enrollment = normalize_enrollment({"id": "e1", "user_id": "u", "course_id": "c"})
    assert enrollment.progress == 0
    assert enrollment.completed_lessons == ()
    assert enrollment.certificate_issued is False
    assert enrollment.certificate_id is None


# ---- certificates ----


def test_certificate_defaults_url_grade_and_completion_date() -> None:
    cert = normalize_certificate(
        {"id": "cert-9", "issued_at": "2024-03-01T00:00:00+00:00"}
    )
    assert cert.certificate_url == "/certificates/cert-9.pdf"
    assert cert.grade == "A"
    assert cert.completion_date == "2024-03-01T00:00:00+00:00"


# ---- payments ----


def test_payment_derives_missing_fee_split() -> None:
    payment = normalize_payment(
        {"id": "p1", "amount": 99.99, "status": "completed"}, SETTINGS
    )
    assert payment.platform_fee == 40.0
    assert payment.instructor_earnings == 59.99
    assert payment.payment_method == "card"


def test_payment_keeps_stored_fee_split() -> None:
    payment = normalize_payment(
        {
            "id": "p1",
            "amount": 10,
            "platform_fee": 1,
            "instructor_earnings": 9,
            "status": "refunded",
            "payment_method": "paypal",
        }
    )
    assert (payment.platform_fee, payment.instructor_earnings) == (1, 9)
    assert payment.status == "refunded"
    assert payment.payment_method == "paypal"


def test_payment_unknown_status_is_rejected() -> None:
    with pytest.raises(NormalizationError, match="unknown payment status"):
        normalize_payment({"id": "p1", "amount": 1, "status": "settled"})


def test_payment_unknown_method_becomes_card() -> None:
    payment = normalize_payment(
        {"id": "p1", "amount": 1, "status": "pending", "payment_method": "crypto"}
    )
    assert payment.payment_method == "card"
