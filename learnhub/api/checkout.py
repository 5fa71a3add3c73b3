"""Checkout: take payment for a course, then enroll the payer.

  Client -> POST /v1/checkout/{course_id}
  -> process_payment at the course's list price (persisted in the background)
  -> enroll_in_course (waits for the enrollment store)
  -> 201 {payment, enrollment}
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from learnhub.api.dependencies import CurrentUser, Engine, http_error
from learnhub.api.schemas import EnrollmentOut, PaymentOut
from learnhub.models.payment import PaymentMethod
from learnhub.services.errors import EngineError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/checkout", tags=["checkout"])


class CheckoutIn(BaseModel):
    # The charge is always the course price; the client only picks a method.
    payment_method: PaymentMethod = "card"


class CheckoutOut(BaseModel):
    payment: PaymentOut
    enrollment: EnrollmentOut


@router.post(
    "/{course_id}", response_model=CheckoutOut, status_code=status.HTTP_201_CREATED
)
async def checkout(
    course_id: str, body: CheckoutIn, principal: CurrentUser, engine: Engine
) -> CheckoutOut:
    course = engine.state.get_course(course_id)
    if course is None:
        raise HTTPException(status_code=404, detail="course not found")
    if engine.is_enrolled(course_id, principal.user_id):
        raise HTTPException(status_code=409, detail="already enrolled")

    try:
        payment = engine.process_payment(
            course_id, principal.user_id, course.price, body.payment_method
        )
        enrollment = await engine.enroll_in_course(
            course_id, principal.user_id, payment
        )
    except EngineError as e:
        logger.warning(
            "Checkout refused: %s",
            e,
            extra={"user_id": principal.user_id, "course_id": course_id},
        )
        raise http_error(e) from e

    return CheckoutOut(
        payment=PaymentOut.from_payment(payment),
        enrollment=EnrollmentOut.from_enrollment(enrollment),
    )
