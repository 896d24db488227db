from __future__ import annotations

import json
from datetime import date, datetime
from zoneinfo import ZoneInfo

from morning_attendance.core.constants import ATTENDANCE_KEY
from morning_attendance.core.enums import EventSource, EventStatus, FailureKind
from morning_attendance.core.result import Err, Ok
from morning_attendance.records.json_record_store import JsonRecordStore
from morning_attendance.records.model import AttendanceSubmission
from morning_attendance.storage.local_state import LocalState

KST = ZoneInfo("Asia/Seoul")
NOW = datetime(2026, 3, 4, 7, 30, tzinfo=KST)


def _store(tmp_path, clock=lambda: NOW):
    state = LocalState(tmp_path / "state.json")
    return JsonRecordStore(state, tz=KST, clock=clock), state


def _submission(student_id="10101", name="Kim", status=EventStatus.CHECK_IN, at=None):
    return AttendanceSubmission(
        student_id=student_id,
        student_name=name,
        status=status,
        timestamp=at or datetime(2026, 3, 4, 7, 5, tzinfo=KST),
    )


def test_append_then_query_returns_same_fields(tmp_path):
    store, _ = _store(tmp_path)
    sub = _submission()

    result = store.append(sub)

    assert isinstance(result, Ok)
    found = store.query(student_id="10101")
    assert len(found) == 1
    e = found[0]
    assert (e.student_id, e.student_name, e.status, e.timestamp) == (
        sub.student_id,
        sub.student_name,
        sub.status,
        sub.timestamp,
    )
    assert e.id == result.data.id
    assert e.submitted_at == NOW
    assert e.source == EventSource.OFFLINE


def test_append_assigns_unique_ids(tmp_path):
    store, _ = _store(tmp_path)
    ids = {store.append(_submission()).data.id for _ in range(20)}
    assert len(ids) == 20


def test_append_persists_immediately(tmp_path):
    store, state = _store(tmp_path)
    store.append(_submission(), source=EventSource.ONLINE_BACKUP)

    raw = json.loads(state.path.read_text(encoding="utf-8"))
    assert raw[ATTENDANCE_KEY][0]["studentId"] == "10101"
    assert raw[ATTENDANCE_KEY][0]["source"] == "online_backup"

    reopened = JsonRecordStore(LocalState(state.path), tz=KST)
    assert len(reopened.query()) == 1


def test_query_filters_by_local_calendar_day_and_student(tmp_path):
    store, _ = _store(tmp_path)
    store.append(_submission(at=datetime(2026, 3, 4, 7, 0, tzinfo=KST)))
    store.append(_submission(student_id="10102", at=datetime(2026, 3, 4, 7, 1, tzinfo=KST)))
    # 00:30 KST on the 5th is still the 4th in UTC; the local day wins.
    store.append(_submission(at=datetime(2026, 3, 5, 0, 30, tzinfo=KST)))

    assert len(store.query()) == 3
    assert len(store.query(on_date=date(2026, 3, 4))) == 2
    assert len(store.query(on_date=date(2026, 3, 5))) == 1
    assert [e.student_id for e in store.query(on_date=date(2026, 3, 4), student_id="10102")] == ["10102"]
    assert store.query(student_id="99999") == []


def test_query_keeps_insertion_order(tmp_path):
    store, _ = _store(tmp_path)
    late = store.append(_submission(at=datetime(2026, 3, 4, 7, 40, tzinfo=KST))).data
    early = store.append(_submission(at=datetime(2026, 3, 4, 7, 0, tzinfo=KST))).data

    assert [e.id for e in store.query()] == [late.id, early.id]


def test_clear_empties_collection(tmp_path):
    store, _ = _store(tmp_path)
    store.append(_submission())
    store.clear()
    assert store.query() == []


def test_pending_and_mark_synced(tmp_path):
    store, _ = _store(tmp_path)
    offline = store.append(_submission()).data
    store.append(_submission(student_id="10102"), source=EventSource.ONLINE_BACKUP)

    assert [e.id for e in store.pending()] == [offline.id]

    changed = store.mark_synced([offline.id], synced_at=NOW)

    assert changed == 1
    assert store.pending() == []
    synced = store.query(student_id="10101")[0]
    assert synced.source == EventSource.REMOTE_SYNCED
    assert synced.synced_at == NOW
    assert synced.timestamp == offline.timestamp


def test_append_reports_persistence_failure_without_raising(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x", encoding="utf-8")
    store = JsonRecordStore(LocalState(blocker / "state.json"), tz=KST, clock=lambda: NOW)

    result = store.append(_submission())

    assert isinstance(result, Err)
    assert result.kind == FailureKind.PERSISTENCE
    assert result.success is False


def test_synthetic_records_are_not_pending(tmp_path):
    store, _ = _store(tmp_path)
    real = store.append(_submission("10101")).data
    backfilled = AttendanceSubmission(
        student_id="10102",
        student_name="Lee",
        status=EventStatus.CHECK_IN,
        timestamp=datetime(2026, 3, 4, 7, 10, tzinfo=KST),
        synthetic=True,
    )
    store.append(backfilled)

    assert [e.id for e in store.pending()] == [real.id]
    assert len(store.query()) == 2


def test_append_many_writes_the_whole_batch(tmp_path):
    store, state = _store(tmp_path)

    result = store.append_many([_submission("10101"), _submission("10102")])

    assert isinstance(result, Ok)
    assert [e.student_id for e in result.data] == ["10101", "10102"]
    assert len(state.get(ATTENDANCE_KEY)) == 2


def test_append_many_failure_stores_nothing(tmp_path):
    # A directory where the state file should be makes every read fail.
    (tmp_path / "state.json").mkdir()
    store, _ = _store(tmp_path)

    result = store.append_many([_submission("10101"), _submission("10102")])

    assert isinstance(result, Err)
    assert result.kind == FailureKind.PERSISTENCE
