"""Admin moderation of the courses in the caller's session.

draft -> pending_approval (publish) -> published (approve) | rejected (reject)

An engine session is loaded from the listed catalogue only (published and
approved courses), and moderation changes stay in that session.  A course
still waiting for approval is therefore never in an admin's session, and
``approve`` or ``reject`` on it answers 404.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from learnhub.api.dependencies import Engine, require_role
from learnhub.api.schemas import CourseOut
from learnhub.models.course import Course
from learnhub.models.principal import Principal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/moderation", tags=["moderation"])

Admin = Annotated[Principal, Depends(require_role("admin"))]


class RejectIn(BaseModel):
    reason: str = Field(min_length=1)


def _found(
    course: Course | None, course_id: str, action: str, admin: Principal
) -> CourseOut:
    if course is None:
        raise HTTPException(status_code=404, detail="course not found")
    logger.info(
        "Course %s by admin=%s",
        action,
        admin.user_id,
        extra={"course_id": course_id, "operation": action},
    )
    return CourseOut.from_course(course)


@router.post("/{course_id}/publish", response_model=CourseOut)
async def publish_course(course_id: str, admin: Admin, engine: Engine) -> CourseOut:
    return _found(engine.publish_course(course_id), course_id, "publish", admin)


@router.post("/{course_id}/approve", response_model=CourseOut)
async def approve_course(course_id: str, admin: Admin, engine: Engine) -> CourseOut:
    return _found(engine.approve_course(course_id), course_id, "approve", admin)


@router.post("/{course_id}/reject", response_model=CourseOut)
async def reject_course(
    course_id: str, body: RejectIn, admin: Admin, engine: Engine
) -> CourseOut:
    course = engine.reject_course(course_id, body.reason)
    return _found(course, course_id, "reject", admin)
