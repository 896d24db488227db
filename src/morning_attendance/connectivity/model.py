from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import format_timestamp
from ..core.enums import ConnectionMode


@dataclass(frozen=True)
class ConnectionStatus:
    # None means "unknown": the probe was dispatched but its answer is opaque.
    connected: Optional[bool]
    mode: ConnectionMode
    message: str
    checked_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "connected": "unknown" if self.connected is None else self.connected,
            "mode": self.mode.value,
            "message": self.message,
            "checkedAt": format_timestamp(self.checked_at),
        }
