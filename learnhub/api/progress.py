from __future__ import annotations

from fastapi import APIRouter, HTTPException

from learnhub.api.dependencies import CurrentUser, Engine
from learnhub.api.schemas import EnrollmentOut

router = APIRouter(prefix="/v1/progress", tags=["progress"])


@router.get("/{course_id}", response_model=EnrollmentOut)
async def get_progress(
    course_id: str, principal: CurrentUser, engine: Engine
) -> EnrollmentOut:
    enrollment = engine.get_enrollment(course_id, principal.user_id)
    if enrollment is None:
        raise HTTPException(status_code=404, detail="not enrolled")
    return EnrollmentOut.from_enrollment(enrollment)


@router.post("/{course_id}/lessons/{lesson_id}", response_model=EnrollmentOut)
async def complete_lesson(
    course_id: str, lesson_id: str, principal: CurrentUser, engine: Engine
) -> EnrollmentOut:
    """Mark a lesson complete.  Re-marking a completed lesson changes nothing."""
    if engine.get_enrollment(course_id, principal.user_id) is None:
        raise HTTPException(status_code=404, detail="not enrolled")

    enrollment = await engine.update_progress(course_id, principal.user_id, lesson_id)
    if enrollment is None:
        # The enrollment store refused the write; local state is unchanged.
        raise HTTPException(status_code=502, detail="progress update failed")
    return EnrollmentOut.from_enrollment(enrollment)
