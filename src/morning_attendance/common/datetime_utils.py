from __future__ import annotations

from datetime import date, datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo


def get_timezone(name: str) -> tzinfo:
    return ZoneInfo(name)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_timestamp(value: str, tz: tzinfo) -> datetime:
    """Parse an ISO-8601 instant. Naive values are taken as local time in `tz`."""

    dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tz)
    return dt


def format_timestamp(value: datetime) -> str:
    return value.isoformat(timespec="milliseconds")


def local_date(value: datetime, tz: tzinfo) -> date:
    return value.astimezone(tz).date()


def trailing_days(today: date, days: int) -> list[date]:
    """`days` consecutive calendar days ending at `today`, oldest first."""
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def now_local(tz: tzinfo) -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(tz)
