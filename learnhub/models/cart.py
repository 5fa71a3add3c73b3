from __future__ import annotations

from dataclasses import dataclass

from learnhub.models.course import Course


@dataclass(frozen=True, slots=True)
class CartItem:
    """A course the learner intends to buy, with the course as it looked when added."""

    course_id: str
    course: Course

    @staticmethod
    def of(course: Course) -> CartItem:
        return CartItem(course_id=course.id, course=course)
