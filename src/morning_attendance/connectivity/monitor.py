from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional

from ..core.constants import DEFAULT_CONNECTIVITY_POLL_SECONDS, DEFAULT_CONNECTIVITY_TIMEOUT_SECONDS
from ..core.enums import ConnectionMode
from ..core.result import Ok
from ..remote.gateway import RemoteGateway
from .model import ConnectionStatus

logger = logging.getLogger(__name__)


async def check_connection(
    gateway: RemoteGateway,
    *,
    clock: Callable[[], datetime],
    timeout: float = DEFAULT_CONNECTIVITY_TIMEOUT_SECONDS,
) -> ConnectionStatus:
    """Probe the remote service once. Never hangs longer than `timeout`."""

    if not gateway.endpoint:
        return ConnectionStatus(
            connected=False,
            mode=ConnectionMode.OFFLINE,
            message="Remote endpoint is not configured",
            checked_at=clock(),
        )

    try:
        result = await asyncio.wait_for(gateway.probe(timeout=timeout), timeout=timeout + 0.5)
    except asyncio.TimeoutError:
        result = None

    if isinstance(result, Ok):
        return ConnectionStatus(
            connected=None,
            mode=ConnectionMode.HYBRID,
            message="Hybrid mode: local + remote",
            checked_at=clock(),
        )

    message = result.message if result is not None else f"Connection timed out after {timeout:g}s"
    return ConnectionStatus(
        connected=False,
        mode=ConnectionMode.LOCAL_ONLY,
        message=f"Local mode: {message}",
        checked_at=clock(),
    )


class ConnectivityMonitor:
    """Background task re-checking connectivity every `interval` seconds.

    Owned by whoever runs the event loop: `start()` / `await stop()` or use
    it as an async context manager.
    """

    def __init__(
        self,
        check: Callable[[], Awaitable[ConnectionStatus]],
        *,
        interval: float = DEFAULT_CONNECTIVITY_POLL_SECONDS,
        on_status: Optional[Callable[[ConnectionStatus], None]] = None,
    ):
        self._check = check
        self._interval = float(interval)
        self._on_status = on_status
        self._task: Optional[asyncio.Task] = None
        self.last_status: Optional[ConnectionStatus] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="connectivity-monitor")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("Connectivity monitor ended with an error")

    async def __aenter__(self) -> "ConnectivityMonitor":
        self.start()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.stop()

    async def _run(self) -> None:
        while True:
            try:
                status = await self._check()
            except Exception:
                # One failed round must not end polling.
                logger.exception("Connectivity check failed")
            else:
                self.last_status = status
                logger.debug("Connection status: %s (%s)", status.mode.value, status.message)
                if self._on_status:
                    try:
                        self._on_status(status)
                    except Exception:
                        logger.exception("Connection status callback failed")
            await asyncio.sleep(self._interval)
