from __future__ import annotations

from collections import defaultdict
from datetime import date, tzinfo
from typing import Iterable, Sequence

from ..common.datetime_utils import local_date, trailing_days
from ..core.constants import DEFAULT_TREND_DAYS
from ..core.enums import DayState, EventStatus
from ..records.model import AttendanceEvent
from ..roster.model import Student
from .model import DailyStats, DayTrend, StudentDayStatus


def completion_rate(completed: int, total: int) -> int:
    """Percentage rounded half up; 0 when there is nobody to count."""

    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)


def day_status(
    events: Iterable[AttendanceEvent],
    *,
    roster: Iterable[Student] = (),
) -> list[StudentDayStatus]:
    """Group one day's events per student.

    `check_in` is the earliest check-in, `check_out` the latest check-out.
    Students from `roster` without any event are listed as missing.
    """

    grouped: dict[str, list[AttendanceEvent]] = {}
    names: dict[str, str] = {}
    for e in events:
        grouped.setdefault(e.student_id, []).append(e)
        names.setdefault(e.student_id, e.student_name)

    for s in roster:
        if s.student_id not in grouped:
            grouped[s.student_id] = []
            names[s.student_id] = s.student_name

    out = []
    for student_id, records in grouped.items():
        check_ins = [r for r in records if r.status == EventStatus.CHECK_IN]
        check_outs = [r for r in records if r.status == EventStatus.CHECK_OUT]
        out.append(
            StudentDayStatus(
                student_id=student_id,
                student_name=names.get(student_id, ""),
                check_in=min(check_ins, key=lambda r: r.timestamp) if check_ins else None,
                check_out=max(check_outs, key=lambda r: r.timestamp) if check_outs else None,
                records=tuple(records),
            )
        )
    return out


def daily_stats(day: date, statuses: Sequence[StudentDayStatus]) -> DailyStats:
    counts = {state: 0 for state in DayState}
    for s in statuses:
        counts[s.state] += 1

    total = len(statuses)
    completed = counts[DayState.COMPLETED]
    return DailyStats(
        date=day,
        total=total,
        completed=completed,
        ongoing=counts[DayState.ONGOING],
        missing=counts[DayState.MISSING],
        completion_rate=completion_rate(completed, total),
        students=list(statuses),
    )


def weekly_trend(
    today: date,
    events: Iterable[AttendanceEvent],
    *,
    tz: tzinfo,
    days: int = DEFAULT_TREND_DAYS,
) -> list[DayTrend]:
    """Completion per day for the trailing `days` days including today, oldest first."""

    by_day: dict[date, list[AttendanceEvent]] = defaultdict(list)
    for e in events:
        by_day[local_date(e.timestamp, tz)].append(e)

    trend = []
    for day in trailing_days(today, days):
        stats = daily_stats(day, day_status(by_day.get(day, [])))
        trend.append(DayTrend(date=day, total=stats.total, completed=stats.completed, rate=stats.completion_rate))
    return trend
