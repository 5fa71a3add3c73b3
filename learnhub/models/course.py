from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

CourseLevel = Literal["Beginner", "Intermediate", "Advanced"]
ModerationState = Literal["draft", "pending_approval", "published", "rejected"]


@dataclass(frozen=True, slots=True)
class Instructor:
    id: str
    name: str
    avatar: str | None = None
    bio: str | None = None


@dataclass(frozen=True, slots=True)
class Course:
    id: str
    title: str
    instructor: Instructor
    thumbnail: str
    category: str = ""
    description: str = ""
    short_description: str = ""
    price: float = 0
    original_price: float | None = None
    rating: float = 0
    total_ratings: int = 0
    total_students: int = 0
    duration: str = "0h"
    level: CourseLevel = "Beginner"
    language: str = "English"
    tags: tuple[str, ...] = ()
    requirements: tuple[str, ...] = ()
    what_you_will_learn: tuple[str, ...] = ()
    target_audience: tuple[str, ...] = ()
    has_subtitles: bool = False
    has_certificate: bool = True
    total_lessons: int = 0
    total_quizzes: int = 0
    total_assignments: int = 0
    is_published: bool = False
    is_draft: bool = True
    is_approved: bool = False
    rejection_reason: str | None = None
    revenue: float = 0
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def moderation_state(self) -> ModerationState:
        """Collapse the moderation flags into the single state they encode."""
        if self.is_draft:
            return "draft"
        if self.is_approved and self.is_published:
            return "published"
        if self.rejection_reason is not None:
            return "rejected"
        return "pending_approval"

    @property
    def is_listed(self) -> bool:
        return self.is_published and self.is_approved
