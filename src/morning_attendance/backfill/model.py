from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..common.datetime_utils import format_timestamp
from ..core.enums import BackfillReason, EventStatus
from ..records.model import AttendanceSubmission


@dataclass(frozen=True)
class BackfillRecord:
    """Policy-generated swipe awaiting review. Never equivalent to a real one."""

    student_id: str
    student_name: str
    status: EventStatus
    timestamp: datetime
    reason: BackfillReason

    synthetic: bool = True

    def to_submission(self) -> AttendanceSubmission:
        return AttendanceSubmission(
            student_id=self.student_id,
            student_name=self.student_name,
            status=self.status,
            timestamp=self.timestamp,
            synthetic=True,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "studentId": self.student_id,
            "studentName": self.student_name,
            "status": self.status.value,
            "timestamp": format_timestamp(self.timestamp),
            "processedTime": self.timestamp.strftime("%H:%M:%S"),
            "reason": self.reason.value,
            "synthetic": True,
        }
