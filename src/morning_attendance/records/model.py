from __future__ import annotations

import random
import string
import time
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any, Optional

from ..common.datetime_utils import format_timestamp, parse_timestamp
from ..core.enums import EventSource, EventStatus

_ID_ALPHABET = string.digits + string.ascii_lowercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(_ID_ALPHABET[rem])
    return "".join(reversed(out))


def new_event_id(now_ms: Optional[int] = None) -> str:
    """Millisecond clock in base 36 followed by five random base-36 chars."""

    ms = int(time.time() * 1000) if now_ms is None else now_ms
    return _to_base36(ms) + "".join(random.choices(_ID_ALPHABET, k=5))


@dataclass(frozen=True)
class AttendanceSubmission:
    """A swipe as handed in by a caller, before the store assigns an id."""

    student_id: str
    student_name: str
    status: EventStatus
    timestamp: datetime
    synthetic: bool = False


@dataclass(frozen=True)
class AttendanceEvent:
    id: str
    student_id: str
    student_name: str
    status: EventStatus
    timestamp: datetime
    submitted_at: Optional[datetime]
    source: EventSource
    synced_at: Optional[datetime] = None
    synthetic: bool = False

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "studentId": self.student_id,
            "studentName": self.student_name,
            "status": self.status.value,
            "timestamp": format_timestamp(self.timestamp),
            "submittedAt": format_timestamp(self.submitted_at) if self.submitted_at else None,
            "source": self.source.value,
        }
        if self.synced_at:
            out["syncedAt"] = format_timestamp(self.synced_at)
        if self.synthetic:
            out["synthetic"] = True
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any], tz: tzinfo) -> "AttendanceEvent":
        submitted = raw.get("submittedAt")
        synced = raw.get("syncedAt")
        return cls(
            id=str(raw["id"]),
            student_id=str(raw["studentId"]),
            student_name=str(raw.get("studentName") or ""),
            status=EventStatus.parse(raw["status"]),
            timestamp=parse_timestamp(raw["timestamp"], tz),
            submitted_at=parse_timestamp(submitted, tz) if submitted else None,
            source=EventSource(raw.get("source") or EventSource.OFFLINE.value),
            synced_at=parse_timestamp(synced, tz) if synced else None,
            synthetic=bool(raw.get("synthetic", False)),
        )
