from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from ..common.validators import require_student_id
from ..core.enums import DataSource, FailureKind
from ..core.exceptions import PersistenceError, ValidationError
from ..core.result import Err, Ok, Result
from ..remote.gateway import RemoteGateway
from .cache import RosterCache
from .model import Student, StudentList

logger = logging.getLogger(__name__)


class StudentDirectory:
    """Student roster: remote list first, then the cached copy."""

    def __init__(self, gateway: RemoteGateway, cache: RosterCache, *, clock: Callable[[], datetime]):
        self._gateway = gateway
        self._cache = cache
        self._clock = clock

    async def get_student_list(self) -> Result[StudentList]:
        cache_source = DataSource.CACHE
        if self._gateway.endpoint:
            result = await self._gateway.fetch_student_list()
            if isinstance(result, Ok):
                students = list(result.data)
                now = self._clock()
                try:
                    self._cache.save(students, updated_at=now)
                except PersistenceError:
                    logger.warning("Student list fetched but could not be cached")
                logger.info("Student list loaded from remote: %d students", len(students))
                return Ok(StudentList(students=students, source=DataSource.REMOTE, updated_at=now))
            logger.warning("Student list fetch failed: %s", result.message)
            cache_source = DataSource.CACHE_FALLBACK

        try:
            cached = self._cache.load()
        except PersistenceError as e:
            return Err(FailureKind.PERSISTENCE, f"Student list unavailable: {e}")
        if cached is None:
            return Err(FailureKind.TRANSPORT, "Student list unavailable")

        students, updated_at = cached
        logger.info("Using cached student list: %d students", len(students))
        return Ok(StudentList(students=students, source=cache_source, updated_at=updated_at))

    async def get_student(self, student_id: str) -> Result[Student]:
        try:
            sid = require_student_id(student_id)
        except ValidationError as e:
            return Err(FailureKind.VALIDATION, str(e))

        roster = await self.get_student_list()
        if isinstance(roster, Err):
            return roster

        student = roster.data.find(sid)
        if not student:
            return Err(FailureKind.VALIDATION, f"No student with id {sid}")
        return Ok(student)
