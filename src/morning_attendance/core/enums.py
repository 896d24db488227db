from __future__ import annotations

from enum import Enum


class EventStatus(str, Enum):
    """Kind of swipe: check-in (입실) or check-out (퇴실)."""

    CHECK_IN = "CHECK_IN"
    CHECK_OUT = "CHECK_OUT"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

    @classmethod
    def parse(cls, value: str) -> "EventStatus":
        """Accept both the enum value and the label used by the spreadsheet."""

        v = (value or "").strip()
        for status, label in STATUS_LABELS.items():
            if v == label or v.upper() == status.value:
                return status
        raise ValueError(f"Unknown attendance status: {value!r}")


STATUS_LABELS = {
    EventStatus.CHECK_IN: "입실",
    EventStatus.CHECK_OUT: "퇴실",
}


class EventSource(str, Enum):
    """Provenance of a stored event. Only used for sync bookkeeping."""

    OFFLINE = "offline"
    ONLINE_BACKUP = "online_backup"
    REMOTE_SYNCED = "synced"
    REMOTE_ONLY = "google_sheets"


class DataSource(str, Enum):
    """Provenance of a query result."""

    LOCAL = "local"
    HYBRID = "hybrid"
    FALLBACK_LOCAL = "fallback_local"
    REMOTE = "google_sheets"
    CACHE = "cache"
    CACHE_FALLBACK = "cache_fallback"


class DayState(str, Enum):
    COMPLETED = "COMPLETED"
    ONGOING = "ONGOING"
    MISSING = "MISSING"


class BackfillReason(str, Enum):
    MISSING_CHECK_IN = "MISSING_CHECK_IN"
    MISSING_CHECK_OUT = "MISSING_CHECK_OUT"


class ConnectionMode(str, Enum):
    OFFLINE = "offline"
    HYBRID = "hybrid"
    LOCAL_ONLY = "local_only"


class Delivery(str, Enum):
    """Outcome of a fire-and-forget remote write.

    The remote response is never read, so a dispatched request only means
    the service accepted it for delivery.
    """

    ACCEPTED_UNCONFIRMED = "ACCEPTED_UNCONFIRMED"


class FailureKind(str, Enum):
    TRANSPORT = "TRANSPORT"
    PARSE = "PARSE"
    PERSISTENCE = "PERSISTENCE"
    VALIDATION = "VALIDATION"
