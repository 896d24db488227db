from __future__ import annotations

import logging
from datetime import date, datetime, time, tzinfo
from typing import Sequence

from ..core.constants import BACKFILL_CHECK_IN_TIME, BACKFILL_CHECK_OUT_TIME
from ..core.enums import BackfillReason, DayState, EventStatus
from ..stats.model import StudentDayStatus
from .model import BackfillRecord

logger = logging.getLogger(__name__)


def _at(day: date, t: time, tz: tzinfo) -> datetime:
    return datetime.combine(day, t, tzinfo=tz)


def detect_and_synthesize(
    day: date,
    statuses: Sequence[StudentDayStatus],
    *,
    tz: tzinfo,
) -> list[BackfillRecord]:
    """Synthetic swipes for one pass of the fixed policy.

    Missing students get a check-in at 07:10, ongoing students a check-out at
    07:47. A missing student only gets the check-in in this pass; the
    check-out follows once the check-in has been committed. Completed
    students are left alone. Missing check-ins come first, like the daily
    review sheet.
    """

    missing = [s for s in statuses if s.state == DayState.MISSING]
    ongoing = [s for s in statuses if s.state == DayState.ONGOING]

    records = [
        BackfillRecord(
            student_id=s.student_id,
            student_name=s.student_name,
            status=EventStatus.CHECK_IN,
            timestamp=_at(day, BACKFILL_CHECK_IN_TIME, tz),
            reason=BackfillReason.MISSING_CHECK_IN,
        )
        for s in missing
    ]
    records += [
        BackfillRecord(
            student_id=s.student_id,
            student_name=s.student_name,
            status=EventStatus.CHECK_OUT,
            timestamp=_at(day, BACKFILL_CHECK_OUT_TIME, tz),
            reason=BackfillReason.MISSING_CHECK_OUT,
        )
        for s in ongoing
    ]

    for r in records:
        logger.info("%s(%s) %s -> %s", r.student_name, r.student_id, r.reason.value, r.timestamp.strftime("%H:%M"))
    return records
