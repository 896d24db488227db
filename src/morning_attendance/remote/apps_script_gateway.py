from __future__ import annotations

import logging
import time
from datetime import date, datetime, tzinfo
from typing import Any, Optional, Sequence

import httpx

from ..common.datetime_utils import format_timestamp, local_date
from ..core.constants import SUBMIT_SOURCE
from ..core.enums import Delivery, FailureKind
from ..core.exceptions import ParseError, TransportError
from ..core.result import Err, Ok, Result
from ..records.model import AttendanceEvent
from ..roster.model import Student
from .gateway import Outgoing, RemoteGateway
from .rows import expand_rows

logger = logging.getLogger(__name__)


class AppsScriptGateway(RemoteGateway):
    """Google Apps Script web app speaking the `action=` protocol.

    Writes are fire-and-forget: the response of `submit` is never inspected,
    so a dispatched request is reported as `ACCEPTED_UNCONFIRMED`. Reads
    (`getAllAttendance`, `getStudentList`) return JSON that is validated.
    Automation triggers are fire-and-forget GETs like submits.
    """

    def __init__(
        self,
        endpoint: Optional[str],
        *,
        tz: tzinfo,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = endpoint or None
        self._tz = tz
        self._timeout = float(timeout)
        self._transport = transport

    def use_endpoint(self, url: Optional[str]) -> None:
        self.endpoint = url or None
        logger.info("Remote endpoint set to %s", self.endpoint)

    def _client(self, timeout: Optional[float] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(timeout if timeout is not None else self._timeout),
            transport=self._transport,
            follow_redirects=True,
        )

    async def submit(self, event: Outgoing) -> Result[Delivery]:
        if not self.endpoint:
            return Err(FailureKind.TRANSPORT, "Remote endpoint is not configured")

        form = {
            "action": "submit",
            "student_id": event.student_id,
            "student_name": event.student_name,
            "status": event.status.label,
            "timestamp": format_timestamp(event.timestamp),
            "source": SUBMIT_SOURCE,
        }
        try:
            async with self._client() as client:
                await client.post(self.endpoint, data=form)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Remote submit failed for %s: %s", event.student_id, e)
            return Err(FailureKind.TRANSPORT, f"Remote submit failed: {e}")

        logger.info("Submit dispatched for %s (%s)", event.student_id, event.status.value)
        return Ok(Delivery.ACCEPTED_UNCONFIRMED, message="Accepted for delivery, outcome unknown")

    async def fetch_all(self, *, on_date: Optional[date] = None) -> Result[Sequence[AttendanceEvent]]:
        try:
            payload = await self._get_json({"action": "getAllAttendance"})
        except TransportError as e:
            return Err(FailureKind.TRANSPORT, str(e))
        except ParseError as e:
            return Err(FailureKind.PARSE, str(e))

        events = expand_rows(payload.get("data") or [], self._tz)
        if on_date is not None:
            events = [e for e in events if local_date(e.timestamp, self._tz) == on_date]
        logger.debug("Remote returned %d events", len(events))
        return Ok(events)

    async def fetch_student_list(self) -> Result[Sequence[Student]]:
        try:
            payload = await self._get_json({"action": "getStudentList"})
        except TransportError as e:
            return Err(FailureKind.TRANSPORT, str(e))
        except ParseError as e:
            return Err(FailureKind.PARSE, str(e))

        rows = payload.get("data")
        if not isinstance(rows, list):
            return Err(FailureKind.PARSE, "Student list payload has no data")
        students = [Student.from_dict(r) for r in rows if isinstance(r, dict) and r.get("studentId")]
        return Ok(students)

    async def probe(self, *, timeout: float) -> Result[None]:
        if not self.endpoint:
            return Err(FailureKind.TRANSPORT, "Remote endpoint is not configured")

        params = {"action": "test", "timestamp": str(int(time.time() * 1000))}
        try:
            async with self._client(timeout) as client:
                await client.get(self.endpoint, params=params)
        except httpx.TimeoutException:
            return Err(FailureKind.TRANSPORT, f"Connection timed out after {timeout:g}s")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            return Err(FailureKind.TRANSPORT, f"Remote service unreachable: {e}")
        return Ok(None)

    async def trigger_automation(self, action: str) -> Result[Delivery]:
        if not self.endpoint:
            return Err(FailureKind.TRANSPORT, "Remote endpoint is not configured")

        params = {
            "action": action,
            "timestamp": format_timestamp(datetime.now(self._tz)),
            "trigger_source": SUBMIT_SOURCE,
        }
        try:
            async with self._client() as client:
                await client.get(self.endpoint, params=params)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Automation %s could not be triggered: %s", action, e)
            return Err(FailureKind.TRANSPORT, f"Automation trigger failed: {e}")

        logger.info("Automation %s triggered", action)
        return Ok(Delivery.ACCEPTED_UNCONFIRMED, message="Accepted for delivery, outcome unknown")

    async def _get_json(self, params: dict[str, str]) -> dict[str, Any]:
        if not self.endpoint:
            raise TransportError("Remote endpoint is not configured")

        try:
            async with self._client() as client:
                resp = await client.get(self.endpoint, params=params)
                resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = getattr(e.response, "status_code", None)
            logger.warning("Remote %s returned HTTP %s", params.get("action"), status)
            raise TransportError(f"Remote service returned HTTP {status}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Network error calling remote %s: %s", params.get("action"), e)
            raise TransportError(f"Network error: {e}") from e

        try:
            payload = resp.json()
        except ValueError as e:
            logger.warning("Remote %s answered with invalid JSON", params.get("action"))
            raise ParseError(f"Invalid JSON from remote service: {e}") from e

        if not isinstance(payload, dict):
            raise ParseError("Remote payload is not an object")
        if not payload.get("success"):
            raise ParseError(str(payload.get("error") or "Remote service reported failure"))
        return payload
