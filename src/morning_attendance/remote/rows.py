"""Translate spreadsheet rows into attendance events.

One remote row holds a student's day: `date` plus optional `checkInTime` and
`checkOutTime`. Each present, parseable time becomes its own event.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, tzinfo
from typing import Any, Iterable, Optional

from ..core.enums import EventSource, EventStatus
from ..records.model import AttendanceEvent

logger = logging.getLogger(__name__)

_TIME_FIELDS = (
    ("checkInTime", EventStatus.CHECK_IN, "checkin"),
    ("checkOutTime", EventStatus.CHECK_OUT, "checkout"),
)


def _row_date(value: Any, tz: tzinfo) -> Optional[date]:
    if not isinstance(value, str) or not value.strip():
        return None
    v = value.strip()
    try:
        if len(v) == 10:
            return date.fromisoformat(v)
        # Sheets can serialize a date cell as a full instant.
        dt = datetime.fromisoformat(v.replace("Z", "+00:00"))
    except ValueError:
        return None
    return dt.astimezone(tz).date() if dt.tzinfo else dt.date()


def _row_time(value: Any) -> Optional[time]:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return time.fromisoformat(value.strip())
    except ValueError:
        return None


def expand_row(row: Any, tz: tzinfo) -> list[AttendanceEvent]:
    if not isinstance(row, dict) or not row.get("studentId"):
        logger.debug("Dropping remote row without student id: %r", row)
        return []

    day = _row_date(row.get("date"), tz)
    events = []
    for field_name, status, suffix in _TIME_FIELDS:
        raw_time = row.get(field_name)
        if not raw_time:
            continue
        at = _row_time(raw_time)
        if day is None or at is None:
            logger.debug("Dropping unparseable %s in remote row %r", field_name, row.get("id"))
            continue
        events.append(
            AttendanceEvent(
                id=f"{row.get('id')}-{suffix}",
                student_id=str(row["studentId"]).strip(),
                student_name=str(row.get("studentName") or "").strip(),
                status=status,
                timestamp=datetime.combine(day, at.replace(tzinfo=None), tzinfo=tz),
                submitted_at=None,
                source=EventSource.REMOTE_ONLY,
            )
        )
    return events


def expand_rows(rows: Iterable[Any], tz: tzinfo) -> list[AttendanceEvent]:
    out: list[AttendanceEvent] = []
    for row in rows:
        out.extend(expand_row(row, tz))
    return out
