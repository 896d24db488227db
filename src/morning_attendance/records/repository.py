from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import EventSource
from ..core.result import Result
from .model import AttendanceEvent, AttendanceSubmission


class RecordStore(Protocol):
    def append(
        self,
        submission: AttendanceSubmission,
        *,
        source: EventSource = EventSource.OFFLINE,
    ) -> Result[AttendanceEvent]:
        """Assign id/submitted_at and persist. Returns `Err(PERSISTENCE)` instead of raising."""

        raise NotImplementedError

    def append_many(
        self,
        submissions: Sequence[AttendanceSubmission],
        *,
        source: EventSource = EventSource.OFFLINE,
    ) -> Result[list[AttendanceEvent]]:
        """Persist a batch in one write; nothing is stored when it fails."""

        raise NotImplementedError

    def query(
        self,
        *,
        student_id: Optional[str] = None,
        on_date: Optional[date] = None,
    ) -> Sequence[AttendanceEvent]:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError

    def pending(self) -> Sequence[AttendanceEvent]:
        """Real swipes never delivered to the remote service. Synthetic ones are excluded."""

        raise NotImplementedError

    def mark_synced(self, event_ids: Iterable[str], *, synced_at: datetime) -> int:
        raise NotImplementedError
