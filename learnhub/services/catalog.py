"""Catalogue search over the session's listed courses.

The query matches title or description, case-insensitively.  ``category``
and ``level`` accept the UI's "All Categories" / "All Levels" sentinels as
"no filter".  Results come newest first.
"""

from __future__ import annotations

from collections.abc import Iterable

from learnhub.models.course import Course

ALL_CATEGORIES = "All Categories"
ALL_LEVELS = "All Levels"


def search_courses(
    courses: Iterable[Course],
    query: str = "",
    *,
    category: str | None = None,
    level: str | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
) -> list[Course]:
    needle = query.strip().lower()
    matches = []
    for course in courses:
        if not course.is_listed:
            continue
        if needle and not (
            needle in course.title.lower() or needle in course.description.lower()
        ):
            continue
        if category and category != ALL_CATEGORIES and course.category != category:
            continue
        if level and level != ALL_LEVELS and course.level != level:
            continue
        if min_price is not None and course.price < min_price:
            continue
        if max_price is not None and course.price > max_price:
            continue
        matches.append(course)
    # Stable: courses without a timestamp keep their catalogue order at the end.
    return sorted(matches, key=lambda c: c.created_at or "", reverse=True)
