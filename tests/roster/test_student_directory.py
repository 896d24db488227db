from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from morning_attendance.core.enums import DataSource, FailureKind
from morning_attendance.core.result import Err, Ok
from morning_attendance.roster.cache import JsonRosterCache
from morning_attendance.roster.model import Student
from morning_attendance.roster.service import StudentDirectory
from morning_attendance.storage.local_state import LocalState

KST = ZoneInfo("Asia/Seoul")
NOW = datetime(2026, 3, 4, 7, 0, tzinfo=KST)


class FakeRosterGateway:
    def __init__(self, endpoint: Optional[str], result=None):
        self.endpoint = endpoint
        self._result = result
        self.calls = 0

    async def fetch_student_list(self):
        self.calls += 1
        return self._result


def _directory(tmp_path, gateway):
    cache = JsonRosterCache(LocalState(tmp_path / "state.json"), tz=KST)
    return StudentDirectory(gateway, cache, clock=lambda: NOW), cache


def test_remote_list_is_returned_and_cached(tmp_path):
    students = [Student("10101", "Kim"), Student("10102", "Lee")]
    directory, cache = _directory(tmp_path, FakeRosterGateway("https://x", Ok(students)))

    result = asyncio.run(directory.get_student_list())

    assert isinstance(result, Ok)
    assert result.data.source == DataSource.REMOTE
    assert result.data.students == students
    cached, updated_at = cache.load()
    assert cached == students
    assert updated_at == NOW


def test_remote_failure_falls_back_to_cache(tmp_path):
    directory, cache = _directory(tmp_path, FakeRosterGateway("https://x", Err(FailureKind.TRANSPORT, "down")))
    cache.save([Student("10101", "Kim")], updated_at=NOW)

    result = asyncio.run(directory.get_student_list())

    assert isinstance(result, Ok)
    assert result.data.source == DataSource.CACHE_FALLBACK
    assert result.data.students == [Student("10101", "Kim")]


def test_offline_uses_cache_without_calling_remote(tmp_path):
    gateway = FakeRosterGateway(None)
    directory, cache = _directory(tmp_path, gateway)
    cache.save([Student("10101", "Kim")], updated_at=NOW)

    result = asyncio.run(directory.get_student_list())

    assert result.data.source == DataSource.CACHE
    assert gateway.calls == 0


def test_no_remote_and_no_cache_is_an_error(tmp_path):
    directory, _ = _directory(tmp_path, FakeRosterGateway(None))

    result = asyncio.run(directory.get_student_list())

    assert isinstance(result, Err)


def test_get_student_by_id(tmp_path):
    directory, _ = _directory(tmp_path, FakeRosterGateway("https://x", Ok([Student("10101", "Kim")])))

    found = asyncio.run(directory.get_student("10101"))
    missing = asyncio.run(directory.get_student("10199"))
    invalid = asyncio.run(directory.get_student("123"))

    assert isinstance(found, Ok) and found.data.student_name == "Kim"
    assert isinstance(missing, Err) and missing.kind == FailureKind.VALIDATION
    assert isinstance(invalid, Err) and invalid.kind == FailureKind.VALIDATION
