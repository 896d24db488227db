from __future__ import annotations

import logging
from datetime import date, datetime, tzinfo
from typing import Any, Callable, Iterable, Optional, Sequence

from ..common.datetime_utils import format_timestamp, local_date, now_local
from ..core.constants import ATTENDANCE_KEY
from ..core.enums import EventSource, FailureKind
from ..core.exceptions import PersistenceError
from ..core.result import Err, Ok, Result
from ..storage.local_state import LocalState
from .model import AttendanceEvent, AttendanceSubmission, new_event_id
from .repository import RecordStore

logger = logging.getLogger(__name__)


class JsonRecordStore(RecordStore):
    """Attendance events kept as a list under one key of the local state file."""

    def __init__(
        self,
        state: LocalState,
        *,
        tz: tzinfo,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._state = state
        self._tz = tz
        self._clock = clock or (lambda: now_local(tz))

    def append(
        self,
        submission: AttendanceSubmission,
        *,
        source: EventSource = EventSource.OFFLINE,
    ) -> Result[AttendanceEvent]:
        stored = self.append_many([submission], source=source)
        if isinstance(stored, Err):
            return stored
        return Ok(stored.data[0], message="Attendance recorded")

    def append_many(
        self,
        submissions: Sequence[AttendanceSubmission],
        *,
        source: EventSource = EventSource.OFFLINE,
    ) -> Result[list[AttendanceEvent]]:
        submitted_at = self._clock()
        ms = int(submitted_at.timestamp() * 1000)
        events = [
            AttendanceEvent(
                id=new_event_id(ms),
                student_id=s.student_id,
                student_name=s.student_name,
                status=s.status,
                timestamp=s.timestamp,
                submitted_at=submitted_at,
                source=source,
                synthetic=s.synthetic,
            )
            for s in submissions
        ]
        # One write for the whole batch: either every event lands or none does.
        try:
            raw = self._load_raw()
            raw.extend(e.to_dict() for e in events)
            self._state.set(ATTENDANCE_KEY, raw)
        except PersistenceError as e:
            return Err(FailureKind.PERSISTENCE, f"Failed to save attendance records: {e}")

        for event in events:
            logger.info("Stored %s for %s (%s)", event.status.value, event.student_id, source.value)
        return Ok(events, message=f"{len(events)} records stored")

    def query(
        self,
        *,
        student_id: Optional[str] = None,
        on_date: Optional[date] = None,
    ) -> Sequence[AttendanceEvent]:
        events = self._load_events()
        if on_date is not None:
            events = [e for e in events if local_date(e.timestamp, self._tz) == on_date]
        if student_id:
            events = [e for e in events if e.student_id == student_id]
        logger.debug("Local query returned %d records", len(events))
        return events

    def clear(self) -> None:
        self._state.remove(ATTENDANCE_KEY)
        logger.info("Local attendance data cleared")

    def pending(self) -> Sequence[AttendanceEvent]:
        # Backfilled events stay local so they are never mistaken for real swipes remotely.
        return [
            e for e in self._load_events() if e.source == EventSource.OFFLINE and not e.synthetic
        ]

    def mark_synced(self, event_ids: Iterable[str], *, synced_at: datetime) -> int:
        ids = set(event_ids)
        if not ids:
            return 0

        raw = self._load_raw()
        changed = 0
        for item in raw:
            if item.get("id") in ids:
                item["source"] = EventSource.REMOTE_SYNCED.value
                item["syncedAt"] = format_timestamp(synced_at)
                changed += 1
        if changed:
            self._state.set(ATTENDANCE_KEY, raw)
        return changed

    def _load_raw(self) -> list[dict[str, Any]]:
        raw = self._state.get(ATTENDANCE_KEY, [])
        if not isinstance(raw, list):
            raise PersistenceError(f"{ATTENDANCE_KEY} is not a list")
        return raw

    def _load_events(self) -> list[AttendanceEvent]:
        events = []
        for item in self._load_raw():
            try:
                events.append(AttendanceEvent.from_dict(item, self._tz))
            except (KeyError, TypeError, ValueError, AttributeError):
                logger.warning("Skipping unreadable local record: %r", item)
        return events
