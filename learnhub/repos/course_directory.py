from __future__ import annotations

from typing import Protocol


class CourseDirectory(Protocol):
    """Catalogue of courses visible to learners (published and approved)."""

    async def list_published_courses(self) -> list[dict]: ...


class InMemoryCourseDirectory:
    def __init__(self, rows: list[dict] | None = None) -> None:
        self._rows: list[dict] = list(rows or [])

    def add(self, row: dict) -> None:
        self._rows.append(row)

    def instructor_of(self, course_id: str) -> str | None:
        for row in self._rows:
            if row.get("id") == course_id:
                instructor = row.get("instructor") or {}
                return row.get("instructor_id") or instructor.get("id")
        return None

    async def list_published_courses(self) -> list[dict]:
        return [
            dict(r)
            for r in self._rows
            if r.get("is_published") and r.get("is_approved")
        ]


def seed_sample_courses(directory: InMemoryCourseDirectory) -> None:
    """Seed a published sample course for local development."""
    directory.add(
        {
            "id": "course-python-101",
            "title": "Python for Programmers",
            "instructor": {"id": "inst-1", "name": "Ada Byron"},
            "category": "Programming",
            "price": 49.99,
            "total_lessons": 4,
            "duration": "6h",
            "is_published": True,
            "is_approved": True,
            "is_draft": False,
        }
    )
