from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Optional, Protocol, Sequence

from ..common.datetime_utils import format_timestamp, parse_timestamp
from ..core.constants import STUDENT_LIST_KEY, STUDENT_LIST_UPDATED_KEY
from ..storage.local_state import LocalState
from .model import Student


class RosterCache(Protocol):
    def load(self) -> Optional[tuple[list[Student], Optional[datetime]]]:
        raise NotImplementedError

    def save(self, students: Sequence[Student], *, updated_at: datetime) -> None:
        raise NotImplementedError


class JsonRosterCache(RosterCache):
    """Last known student list, cached next to the attendance data."""

    def __init__(self, state: LocalState, *, tz: tzinfo):
        self._state = state
        self._tz = tz

    def load(self) -> Optional[tuple[list[Student], Optional[datetime]]]:
        raw = self._state.get(STUDENT_LIST_KEY)
        if not isinstance(raw, list):
            return None
        updated = self._state.get(STUDENT_LIST_UPDATED_KEY)
        students = [Student.from_dict(r) for r in raw if isinstance(r, dict) and r.get("studentId")]
        return students, parse_timestamp(updated, self._tz) if updated else None

    def save(self, students: Sequence[Student], *, updated_at: datetime) -> None:
        self._state.set(STUDENT_LIST_KEY, [s.to_dict() for s in students])
        self._state.set(STUDENT_LIST_UPDATED_KEY, format_timestamp(updated_at))
