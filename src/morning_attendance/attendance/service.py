from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, tzinfo
from typing import Any, Callable, Optional, Sequence, Union

import httpx

from ..backfill.model import BackfillRecord
from ..backfill.policy import detect_and_synthesize
from ..common.datetime_utils import format_timestamp, now_local
from ..common.validators import require_non_empty, require_student_id
from ..connectivity.model import ConnectionStatus
from ..connectivity.monitor import check_connection
from ..core.constants import (
    DEFAULT_AUTOMATION_ACTION,
    DEFAULT_CONNECTIVITY_TIMEOUT_SECONDS,
    DEFAULT_EXPORT_PREFIX,
    ENDPOINT_KEY,
    REMOTE_HOST_MARKER,
    SYSTEM_VERSION,
)
from ..core.enums import DataSource, Delivery, EventSource, EventStatus, FailureKind
from ..core.exceptions import PersistenceError, ValidationError
from ..core.result import Err, Ok, Result
from ..export.exporter import ExportFile, export_events
from ..records.model import AttendanceEvent, AttendanceSubmission
from ..records.repository import RecordStore
from ..remote.gateway import RemoteGateway
from ..roster.service import StudentDirectory
from ..stats.aggregator import daily_stats, day_status, weekly_trend
from ..stats.model import DailyStats, DayTrend
from ..storage.local_state import LocalState
from ..sync.reconciler import MergedEvents, merge

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncReport:
    synced_count: int
    total_count: int

    def to_dict(self) -> dict[str, int]:
        return {"syncedCount": self.synced_count, "totalCount": self.total_count}


class AttendanceService:
    """Local-first attendance: every swipe lands in the record store, the
    remote spreadsheet is a best-effort mirror merged back in on reads."""

    def __init__(
        self,
        records: RecordStore,
        gateway: RemoteGateway,
        students: StudentDirectory,
        settings: LocalState,
        *,
        tz: tzinfo,
        clock: Optional[Callable[[], datetime]] = None,
        connectivity_timeout: float = DEFAULT_CONNECTIVITY_TIMEOUT_SECONDS,
        export_prefix: str = DEFAULT_EXPORT_PREFIX,
    ):
        self._records = records
        self._gateway = gateway
        self._students = students
        self._settings = settings
        self._tz = tz
        self._clock = clock or (lambda: now_local(tz))
        self._connectivity_timeout = float(connectivity_timeout)
        self._export_prefix = export_prefix

    def _today(self) -> date:
        return self._clock().date()

    # ------------------------------------------------------------------ writes

    async def submit(
        self,
        *,
        student_id: str,
        student_name: str,
        status: Union[EventStatus, str],
        timestamp: Optional[datetime] = None,
    ) -> Result[AttendanceEvent]:
        try:
            submission = AttendanceSubmission(
                student_id=require_student_id(student_id),
                student_name=require_non_empty(student_name, "Student name"),
                status=status if isinstance(status, EventStatus) else self._parse_status(status),
                timestamp=self._localize(timestamp) if timestamp else self._clock(),
            )
        except ValidationError as e:
            return Err(FailureKind.VALIDATION, str(e))

        source = EventSource.OFFLINE
        delivered = False
        if self._gateway.endpoint:
            delivery = await self._gateway.submit(submission)
            if isinstance(delivery, Ok):
                source = EventSource.ONLINE_BACKUP
                delivered = True

        # The local write is the commit point, whatever happened remotely.
        stored = self._records.append(submission, source=source)
        if isinstance(stored, Err):
            return stored

        label = f"{submission.student_name} {submission.status.label}"
        if delivered:
            message = f"{label}: sent to the remote sheet (delivery unconfirmed) and saved locally"
        elif self._gateway.endpoint:
            message = f"{label}: remote unavailable, saved locally and will sync later"
        else:
            message = f"{label}: saved locally"
        return Ok(stored.data, message=message)

    def commit_backfill(self, records: Sequence[BackfillRecord]) -> Result[list[AttendanceEvent]]:
        """Explicit commit step for reviewed backfill records.

        The batch is written at once, so a failure leaves nothing committed.
        Committed records stay local: `sync_pending` never sends them.
        """

        stored = self._records.append_many([r.to_submission() for r in records], source=EventSource.OFFLINE)
        if isinstance(stored, Err):
            return Err(stored.kind, f"No backfill records committed: {stored.message}")
        return Ok(stored.data, message=f"{len(stored.data)} backfill records committed")

    async def sync_pending(self) -> Result[SyncReport]:
        """Re-send records that never reached the remote service."""

        if not self._gateway.endpoint:
            return Err(FailureKind.TRANSPORT, "Remote endpoint is not configured")

        try:
            pending = list(self._records.pending())
        except PersistenceError as e:
            return Err(FailureKind.PERSISTENCE, str(e))
        if not pending:
            return Ok(SyncReport(synced_count=0, total_count=0), message="Nothing to sync")

        synced_ids = []
        for event in pending:
            result = await self._gateway.submit(event)
            if isinstance(result, Ok):
                synced_ids.append(event.id)
            else:
                logger.warning("Sync of %s failed: %s", event.id, result.message)

        try:
            self._records.mark_synced(synced_ids, synced_at=self._clock())
        except PersistenceError as e:
            return Err(FailureKind.PERSISTENCE, str(e))

        report = SyncReport(synced_count=len(synced_ids), total_count=len(pending))
        return Ok(report, message=f"{report.synced_count} of {report.total_count} offline records synced")

    def clear_local_data(self) -> Result[None]:
        try:
            self._records.clear()
        except PersistenceError as e:
            return Err(FailureKind.PERSISTENCE, str(e))
        return Ok(None, message="Local data cleared")

    async def configure_endpoint(self, url: str) -> Result[str]:
        url = (url or "").strip()
        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL:
            return Err(FailureKind.VALIDATION, "Enter a valid Google Apps Script URL")
        if parsed.scheme not in ("http", "https") or REMOTE_HOST_MARKER not in parsed.host:
            return Err(FailureKind.VALIDATION, "Enter a valid Google Apps Script URL")

        previous = self._gateway.endpoint
        self._gateway.use_endpoint(url)
        probe = await self._gateway.probe(timeout=self._connectivity_timeout)
        if isinstance(probe, Err):
            self._gateway.use_endpoint(previous)
            return probe

        try:
            self._settings.set(ENDPOINT_KEY, url)
        except PersistenceError as e:
            return Err(FailureKind.PERSISTENCE, str(e))
        return Ok(url, message="Remote endpoint configured")

    async def trigger_automation(self, action: str = DEFAULT_AUTOMATION_ACTION) -> Result[Delivery]:
        """Ask the spreadsheet to run one of its own jobs (e.g. `processMissing`)."""

        if not self._gateway.endpoint:
            return Err(FailureKind.TRANSPORT, "Automation is not available in offline mode")
        try:
            action = require_non_empty(action, "Automation type")
        except ValidationError as e:
            return Err(FailureKind.VALIDATION, str(e))

        result = await self._gateway.trigger_automation(action)
        if isinstance(result, Ok):
            return Ok(result.data, message=f"{action} triggered; the remote service runs it in the background")
        return result

    # ------------------------------------------------------------------- reads

    async def get_attendance_data(
        self,
        *,
        on_date: Optional[date] = None,
        student_id: Optional[str] = None,
    ) -> Result[MergedEvents]:
        local_ok = True
        try:
            local = list(self._records.query(student_id=student_id, on_date=on_date))
        except PersistenceError as e:
            logger.warning("Local records unavailable: %s", e)
            local, local_ok = [], False

        if not self._gateway.endpoint:
            if not local_ok:
                return Err(FailureKind.PERSISTENCE, "Local records unavailable")
            return Ok(replace(merge([], local), source=DataSource.LOCAL))

        fetched = await self._gateway.fetch_all(on_date=on_date)
        if isinstance(fetched, Err):
            logger.warning("Remote fetch failed, using local data only: %s", fetched.message)
            if not local_ok:
                return Err(FailureKind.PERSISTENCE, "Local records unavailable and remote fetch failed")
            merged = merge([], local, remote_ok=False)
            return Ok(merged, message=f"Remote unavailable ({fetched.message}); showing local data")

        remote = [e for e in fetched.data if not student_id or e.student_id == student_id]
        merged = merge(remote, local)
        logger.info(
            "Merged attendance: remote %d + local %d = %d",
            merged.remote_count,
            merged.local_count,
            merged.total,
        )
        return Ok(merged)

    async def get_student_history(self, student_id: str) -> Result[MergedEvents]:
        try:
            sid = require_student_id(student_id)
        except ValidationError as e:
            return Err(FailureKind.VALIDATION, str(e))
        return await self.get_attendance_data(student_id=sid)

    async def get_today_stats(self, today: Optional[date] = None) -> Result[DailyStats]:
        day = today or self._today()
        data = await self.get_attendance_data(on_date=day)
        if isinstance(data, Err):
            return data
        return Ok(daily_stats(day, day_status(data.data.events)))

    async def get_weekly_stats(self, today: Optional[date] = None) -> Result[list[DayTrend]]:
        data = await self.get_attendance_data()
        if isinstance(data, Err):
            return data
        return Ok(weekly_trend(today or self._today(), data.data.events, tz=self._tz))

    async def process_missing_data(self, day: Optional[date] = None) -> Result[list[BackfillRecord]]:
        """Preview backfill records for `day`. Nothing is written here."""

        day = day or self._today()
        data = await self.get_attendance_data(on_date=day)
        if isinstance(data, Err):
            return data

        roster = await self._students.get_student_list()
        students = roster.data.students if isinstance(roster, Ok) else []

        statuses = day_status(data.data.events, roster=students)
        records = detect_and_synthesize(day, statuses, tz=self._tz)
        return Ok(records, message=f"{len(records)} missing records detected")

    async def check_connection(self) -> ConnectionStatus:
        return await check_connection(self._gateway, clock=self._clock, timeout=self._connectivity_timeout)

    def export_data(self, fmt: str = "csv") -> ExportFile:
        """Raises ValidationError when there is nothing to export."""

        events = list(self._records.query())
        return export_events(events, fmt, prefix=self._export_prefix, tz=self._tz, today=self._today())

    def get_system_info(self) -> Result[dict[str, Any]]:
        try:
            events = list(self._records.query())
            pending = len(self._records.pending())
        except PersistenceError as e:
            return Err(FailureKind.PERSISTENCE, str(e))

        last = max((e.timestamp for e in events), default=None)
        online = bool(self._gateway.endpoint)
        return Ok(
            {
                "mode": "google_sheets" if online else "offline_only",
                "webAppUrl": self._gateway.endpoint,
                "localRecords": len(events),
                "pendingSync": pending,
                "lastUpdate": format_timestamp(last) if last else None,
                "version": SYSTEM_VERSION,
                "features": {
                    "offline_storage": True,
                    "remote_sync": online,
                    "auto_processing": True,
                },
            }
        )

    def _localize(self, value: datetime) -> datetime:
        # Naive wall-clock times are read in the configured timezone, not the host's.
        return value.replace(tzinfo=self._tz) if value.tzinfo is None else value

    @staticmethod
    def _parse_status(value: str) -> EventStatus:
        try:
            return EventStatus.parse(value)
        except ValueError as e:
            raise ValidationError(str(e)) from e
