from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class StudentProfile:
    """Read-only view of a student record owned by the administration screens."""

    student_id: str
    full_name: str
    department: Optional[str] = None
    year_level: Optional[str] = None
    section: Optional[str] = None
