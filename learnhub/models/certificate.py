from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Certificate:
    """Issued course-completion certificate.

    ``verification_code`` is the public handle a third party uses to check
    the certificate; it is unique across all issued certificates.
    """

    id: str
    user_id: str
    course_id: str
    course_name: str
    instructor_name: str
    issued_at: str
    completion_date: str
    verification_code: str
    certificate_url: str
    grade: str = "A"
