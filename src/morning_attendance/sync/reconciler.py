"""Merge remote and local attendance events into one view.

Remote events win on a dedup-key collision: the remote copy is the state
after any earlier sync, local-only entries only fill gaps.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timezone
from typing import Any, Iterable, Sequence

from ..core.enums import DataSource, EventStatus
from ..records.model import AttendanceEvent

DedupKey = tuple[str, str, EventStatus, str]


def dedup_key(event: AttendanceEvent) -> DedupKey:
    """(calendar date, student id, status, HH:MM), all in UTC."""

    ts = event.timestamp.astimezone(timezone.utc)
    return (ts.date().isoformat(), event.student_id, event.status, ts.strftime("%H:%M"))


@dataclass(frozen=True)
class MergedEvents:
    events: list[AttendanceEvent]
    source: DataSource
    remote_count: int
    local_count: int

    @property
    def total(self) -> int:
        return len(self.events)

    @property
    def fallback(self) -> bool:
        return self.source == DataSource.FALLBACK_LOCAL

    def to_dict(self) -> dict[str, Any]:
        return {
            "records": [e.to_dict() for e in self.events],
            "source": self.source.value,
            "remoteCount": self.remote_count,
            "localCount": self.local_count,
            "total": self.total,
        }


def merge(
    remote: Iterable[AttendanceEvent],
    local: Iterable[AttendanceEvent],
    *,
    remote_ok: bool = True,
) -> MergedEvents:
    remote_events: Sequence[AttendanceEvent] = list(remote)
    local_events: Sequence[AttendanceEvent] = list(local)

    merged: list[AttendanceEvent] = []
    seen: set[DedupKey] = set()
    for event in [*remote_events, *local_events]:
        key = dedup_key(event)
        if key in seen:
            continue
        seen.add(key)
        merged.append(event)

    merged.sort(key=lambda e: e.timestamp, reverse=True)

    return MergedEvents(
        events=merged,
        source=DataSource.HYBRID if remote_ok else DataSource.FALLBACK_LOCAL,
        remote_count=len(remote_events),
        local_count=len(local_events),
    )
