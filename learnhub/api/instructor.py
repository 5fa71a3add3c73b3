"""Instructor dashboards: enrolled students per course, and revenue.

Both read the durable stores directly; the caller must hold the
``instructor`` role and may only see courses they teach.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from learnhub.api.dependencies import Engine, http_error, require_role
from learnhub.api.schemas import EnrollmentOut, PaymentOut, RevenueOut
from learnhub.models.principal import Principal
from learnhub.services.errors import EngineError
from learnhub.services.instructor import summarize_revenue

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/instructor", tags=["instructor"])

Instructor = Annotated[Principal, Depends(require_role("instructor"))]


@router.get("/courses/{course_id}/students", response_model=list[EnrollmentOut])
async def course_students(
    course_id: str, instructor: Instructor, engine: Engine
) -> list[EnrollmentOut]:
    course = engine.state.get_course(course_id)
    if course is None:
        raise HTTPException(status_code=404, detail="course not found")
    if course.instructor.id != instructor.user_id:
        logger.warning(
            "Student list refused: user=%s does not teach the course",
            instructor.user_id,
            extra={"course_id": course_id, "operation": "instructor"},
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="not your course"
        )

    try:
        enrollments = await engine.course_students(course_id)
    except EngineError as e:
        raise http_error(e) from e
    return [EnrollmentOut.from_enrollment(e) for e in enrollments]


@router.get("/revenue", response_model=RevenueOut)
async def revenue(instructor: Instructor, engine: Engine) -> RevenueOut:
    try:
        payments = await engine.instructor_payments(instructor.user_id)
    except EngineError as e:
        raise http_error(e) from e

    summary = summarize_revenue(payments)
    return RevenueOut(
        total_revenue=summary.total_revenue,
        platform_fees=summary.platform_fees,
        instructor_earnings=summary.instructor_earnings,
        payment_count=summary.payment_count,
        payments=[PaymentOut.from_payment(p) for p in payments],
    )
