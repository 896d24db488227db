from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo
from pathlib import Path
from types import ModuleType
from typing import Callable, Optional

import httpx

from .attendance.service import AttendanceService
from .common.datetime_utils import get_timezone, now_local
from .connectivity.monitor import ConnectivityMonitor
from .core.constants import (
    DEFAULT_CONNECTIVITY_POLL_SECONDS,
    DEFAULT_CONNECTIVITY_TIMEOUT_SECONDS,
    DEFAULT_EXPORT_PREFIX,
    DEFAULT_REMOTE_TIMEOUT_SECONDS,
    DEFAULT_TIMEZONE,
    ENDPOINT_KEY,
)
from .core.exceptions import PersistenceError
from .records.json_record_store import JsonRecordStore
from .remote.apps_script_gateway import AppsScriptGateway
from .roster.cache import JsonRosterCache
from .roster.service import StudentDirectory
from .storage.local_state import LocalState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppConfig:
    data_file: Path
    remote_endpoint: Optional[str] = None
    timezone: str = DEFAULT_TIMEZONE
    remote_timeout: float = DEFAULT_REMOTE_TIMEOUT_SECONDS
    connectivity_timeout: float = DEFAULT_CONNECTIVITY_TIMEOUT_SECONDS
    connectivity_interval: float = DEFAULT_CONNECTIVITY_POLL_SECONDS
    export_prefix: str = DEFAULT_EXPORT_PREFIX

    @classmethod
    def from_settings(cls, settings: ModuleType) -> "AppConfig":
        return cls(
            data_file=Path(getattr(settings, "DATA_FILE")),
            remote_endpoint=getattr(settings, "REMOTE_ENDPOINT", "") or None,
            timezone=str(getattr(settings, "TIMEZONE", DEFAULT_TIMEZONE)),
            remote_timeout=float(getattr(settings, "REMOTE_TIMEOUT_SECONDS", DEFAULT_REMOTE_TIMEOUT_SECONDS)),
            connectivity_timeout=float(
                getattr(settings, "CONNECTIVITY_TIMEOUT_SECONDS", DEFAULT_CONNECTIVITY_TIMEOUT_SECONDS)
            ),
            connectivity_interval=float(
                getattr(settings, "CONNECTIVITY_POLL_SECONDS", DEFAULT_CONNECTIVITY_POLL_SECONDS)
            ),
            export_prefix=str(getattr(settings, "EXPORT_PREFIX", DEFAULT_EXPORT_PREFIX)),
        )


@dataclass(frozen=True)
class Container:
    config: AppConfig
    tz: tzinfo

    state: LocalState
    record_store: JsonRecordStore
    gateway: AppsScriptGateway
    student_directory: StudentDirectory

    attendance_service: AttendanceService
    monitor: ConnectivityMonitor


def build_container(
    config: AppConfig,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> Container:
    tz = get_timezone(config.timezone)
    clock = clock or (lambda: now_local(tz))

    state = LocalState(config.data_file)

    # An endpoint saved at runtime wins over the configured one.
    endpoint = config.remote_endpoint
    try:
        endpoint = state.get(ENDPOINT_KEY) or endpoint
    except PersistenceError:
        logger.warning("Could not read stored endpoint, using configured one")

    record_store = JsonRecordStore(state, tz=tz, clock=clock)
    gateway = AppsScriptGateway(endpoint, tz=tz, timeout=config.remote_timeout, transport=transport)
    student_directory = StudentDirectory(gateway, JsonRosterCache(state, tz=tz), clock=clock)

    attendance_service = AttendanceService(
        record_store,
        gateway,
        student_directory,
        state,
        tz=tz,
        clock=clock,
        connectivity_timeout=config.connectivity_timeout,
        export_prefix=config.export_prefix,
    )
    monitor = ConnectivityMonitor(attendance_service.check_connection, interval=config.connectivity_interval)

    return Container(
        config=config,
        tz=tz,
        state=state,
        record_store=record_store,
        gateway=gateway,
        student_directory=student_directory,
        attendance_service=attendance_service,
        monitor=monitor,
    )
