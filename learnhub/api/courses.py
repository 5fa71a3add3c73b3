"""Course catalogue endpoints, served from the caller's engine session."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query

from learnhub.api.dependencies import CurrentUser, Engine
from learnhub.api.schemas import CourseOut

router = APIRouter(prefix="/v1/courses", tags=["courses"])


@router.get("", response_model=list[CourseOut])
async def list_courses(engine: Engine) -> list[CourseOut]:
    return [CourseOut.from_course(c) for c in engine.state.courses]


@router.get("/search", response_model=list[CourseOut])
async def search_courses(
    engine: Engine,
    q: str = "",
    category: str | None = None,
    level: str | None = None,
    min_price: Annotated[float | None, Query(ge=0)] = None,
    max_price: Annotated[float | None, Query(ge=0)] = None,
) -> list[CourseOut]:
    courses = engine.search_courses(
        q,
        category=category,
        level=level,
        min_price=min_price,
        max_price=max_price,
    )
    return [CourseOut.from_course(c) for c in courses]


@router.get("/enrolled", response_model=list[CourseOut])
async def list_enrolled_courses(
    principal: CurrentUser, engine: Engine
) -> list[CourseOut]:
    return [
        CourseOut.from_course(c)
        for c in engine.get_enrolled_courses(principal.user_id)
    ]
