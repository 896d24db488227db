from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence, Union

from ..core.enums import Delivery
from ..core.result import Result
from ..records.model import AttendanceEvent, AttendanceSubmission
from ..roster.model import Student

Outgoing = Union[AttendanceSubmission, AttendanceEvent]


class RemoteGateway(Protocol):
    """Stateless translator over the remote spreadsheet service.

    Implementations never raise for transport or payload problems; they
    report them as `Err(TRANSPORT)` / `Err(PARSE)`.
    """

    endpoint: Optional[str]

    def use_endpoint(self, url: Optional[str]) -> None:
        raise NotImplementedError

    async def submit(self, event: Outgoing) -> Result[Delivery]:
        raise NotImplementedError

    async def fetch_all(self, *, on_date: Optional[date] = None) -> Result[Sequence[AttendanceEvent]]:
        raise NotImplementedError

    async def fetch_student_list(self) -> Result[Sequence[Student]]:
        raise NotImplementedError

    async def probe(self, *, timeout: float) -> Result[None]:
        raise NotImplementedError

    async def trigger_automation(self, action: str) -> Result[Delivery]:
        """Fire-and-forget request asking the remote service to run `action`."""

        raise NotImplementedError
