from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from ..core.enums import DayState
from ..records.model import AttendanceEvent


@dataclass(frozen=True)
class StudentDayStatus:
    """One student's day, derived fresh from the reconciled events."""

    student_id: str
    student_name: str
    check_in: Optional[AttendanceEvent]
    check_out: Optional[AttendanceEvent]
    records: tuple[AttendanceEvent, ...] = ()

    @property
    def state(self) -> DayState:
        if self.check_in is None:
            return DayState.MISSING
        if self.check_out is None:
            return DayState.ONGOING
        return DayState.COMPLETED

    def to_dict(self) -> dict[str, Any]:
        return {
            "studentId": self.student_id,
            "studentName": self.student_name,
            "checkIn": self.check_in.to_dict() if self.check_in else None,
            "checkOut": self.check_out.to_dict() if self.check_out else None,
            "records": [r.to_dict() for r in self.records],
            "state": self.state.value,
        }


@dataclass(frozen=True)
class DailyStats:
    date: date
    total: int
    completed: int
    ongoing: int
    missing: int
    completion_rate: int
    students: list[StudentDayStatus]

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "total": self.total,
            "completed": self.completed,
            "ongoing": self.ongoing,
            "missing": self.missing,
            "completionRate": self.completion_rate,
            "students": [s.to_dict() for s in self.students],
        }


@dataclass(frozen=True)
class DayTrend:
    date: date
    total: int
    completed: int
    rate: int

    @property
    def date_label(self) -> str:
        return f"{self.date.month}월 {self.date.day}일"

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "dateLabel": self.date_label,
            "total": self.total,
            "completed": self.completed,
            "rate": self.rate,
        }
