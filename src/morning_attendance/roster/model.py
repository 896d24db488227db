from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..core.enums import DataSource


@dataclass(frozen=True)
class Student:
    student_id: str
    student_name: str

    def to_dict(self) -> dict[str, Any]:
        return {"studentId": self.student_id, "studentName": self.student_name}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Student":
        return cls(student_id=str(raw["studentId"]).strip(), student_name=str(raw.get("studentName") or "").strip())


@dataclass(frozen=True)
class StudentList:
    """Roster plus where it came from (remote, cache, cache fallback)."""

    students: list[Student]
    source: DataSource
    updated_at: Optional[datetime] = None

    def find(self, student_id: str) -> Optional[Student]:
        for s in self.students:
            if s.student_id == student_id:
                return s
        return None
