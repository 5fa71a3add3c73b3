from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from learnhub.api.dependencies import CurrentUser, Engine
from learnhub.api.schemas import CertificateOut

router = APIRouter(prefix="/v1/certificates", tags=["certificates"])


@router.post(
    "/{course_id}",
    response_model=CertificateOut,
    status_code=status.HTTP_201_CREATED,
)
async def complete_course(
    course_id: str, principal: CurrentUser, engine: Engine
) -> CertificateOut:
    certificate = await engine.complete_course(course_id, principal.user_id)
    if certificate is None:
        raise HTTPException(
            status_code=422,
            detail="course not eligible for a certificate",
        )
    return CertificateOut.from_certificate(certificate)
