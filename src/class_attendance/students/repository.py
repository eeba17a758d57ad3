from __future__ import annotations

from typing import Optional, Protocol

from .model import StudentProfile


class StudentRepository(Protocol):
    def get_by_student_id(self, student_id: str) -> Optional[StudentProfile]:
        raise NotImplementedError
