from __future__ import annotations

import asyncio
from datetime import date, datetime
from urllib.parse import parse_qs
from zoneinfo import ZoneInfo

import httpx

from morning_attendance.core.enums import Delivery, EventSource, EventStatus, FailureKind
from morning_attendance.core.result import Err, Ok
from morning_attendance.records.model import AttendanceSubmission
from morning_attendance.remote.apps_script_gateway import AppsScriptGateway

KST = ZoneInfo("Asia/Seoul")
URL = "https://script.google.com/macros/s/test/exec"


def _gateway(handler, endpoint=URL):
    return AppsScriptGateway(endpoint, tz=KST, timeout=1.0, transport=httpx.MockTransport(handler))


def _submission():
    return AttendanceSubmission(
        student_id="10101",
        student_name="김민지",
        status=EventStatus.CHECK_IN,
        timestamp=datetime(2026, 3, 4, 7, 5, tzinfo=KST),
    )


def test_submit_posts_form_and_ignores_response_body():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["form"] = parse_qs(request.content.decode("utf-8"))
        return httpx.Response(500, text="opaque")

    result = asyncio.run(_gateway(handler).submit(_submission()))

    assert isinstance(result, Ok)
    assert result.data == Delivery.ACCEPTED_UNCONFIRMED
    assert seen["method"] == "POST"
    form = seen["form"]
    assert form["action"] == ["submit"]
    assert form["student_id"] == ["10101"]
    assert form["student_name"] == ["김민지"]
    assert form["status"] == ["입실"]
    assert form["source"] == ["web_interface"]
    assert form["timestamp"][0].startswith("2026-03-04T07:05:00")


def test_submit_transport_error_is_reported_not_raised():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    result = asyncio.run(_gateway(handler).submit(_submission()))

    assert isinstance(result, Err)
    assert result.kind == FailureKind.TRANSPORT


def test_submit_without_endpoint_fails_fast():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    result = asyncio.run(_gateway(handler, endpoint=None).submit(_submission()))

    assert isinstance(result, Err)
    assert result.kind == FailureKind.TRANSPORT


def test_fetch_all_expands_rows_and_drops_unparseable_times():
    payload = {
        "success": True,
        "data": [
            {"id": "r1", "studentId": "10101", "studentName": "A", "date": "2026-03-04",
             "checkInTime": "07:02:00", "checkOutTime": "07:45:00"},
            {"id": "r2", "studentId": "10102", "studentName": "B", "date": "2026-03-04",
             "checkInTime": "07:03:00"},
            {"id": "r3", "studentId": "10103", "studentName": "C", "date": "2026-03-04",
             "checkInTime": "not a time", "checkOutTime": "07:50:00"},
            {"id": "r4", "studentId": "10104", "studentName": "D", "date": "garbage",
             "checkInTime": "07:00:00"},
            {"id": "r5", "studentId": "10105", "studentName": "E", "date": "2026-03-04"},
        ],
    }

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["action"] == "getAllAttendance"
        return httpx.Response(200, json=payload)

    result = asyncio.run(_gateway(handler).fetch_all())

    assert isinstance(result, Ok)
    ids = [e.id for e in result.data]
    assert ids == ["r1-checkin", "r1-checkout", "r2-checkin", "r3-checkout"]
    first = result.data[0]
    assert first.status == EventStatus.CHECK_IN
    assert first.source == EventSource.REMOTE_ONLY
    assert first.timestamp == datetime(2026, 3, 4, 7, 2, tzinfo=KST)


def test_fetch_all_filters_by_date_after_expansion():
    payload = {
        "success": True,
        "data": [
            {"id": "a", "studentId": "10101", "studentName": "A", "date": "2026-03-03", "checkInTime": "07:00:00"},
            {"id": "b", "studentId": "10101", "studentName": "A", "date": "2026-03-04", "checkInTime": "07:00:00"},
        ],
    }

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    result = asyncio.run(_gateway(handler).fetch_all(on_date=date(2026, 3, 4)))

    assert [e.id for e in result.data] == ["b-checkin"]


def test_fetch_all_reports_remote_failure_flag_as_parse_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": False, "error": "sheet missing"})

    result = asyncio.run(_gateway(handler).fetch_all())

    assert isinstance(result, Err)
    assert result.kind == FailureKind.PARSE
    assert "sheet missing" in result.message


def test_fetch_all_invalid_json_is_parse_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>login</html>")

    result = asyncio.run(_gateway(handler).fetch_all())

    assert isinstance(result, Err)
    assert result.kind == FailureKind.PARSE


def test_fetch_all_http_error_is_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    result = asyncio.run(_gateway(handler).fetch_all())

    assert isinstance(result, Err)
    assert result.kind == FailureKind.TRANSPORT


def test_fetch_student_list():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["action"] == "getStudentList"
        return httpx.Response(
            200,
            json={"success": True, "data": [{"studentId": "10101", "studentName": "A"}, {"studentName": "no id"}]},
        )

    result = asyncio.run(_gateway(handler).fetch_student_list())

    assert isinstance(result, Ok)
    assert [(s.student_id, s.student_name) for s in result.data] == [("10101", "A")]


def test_probe_timeout_reports_timed_out():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["action"] == "test"
        raise httpx.ReadTimeout("slow", request=request)

    result = asyncio.run(_gateway(handler).probe(timeout=3))

    assert isinstance(result, Err)
    assert "timed out" in result.message


def test_malformed_endpoint_is_reported_not_raised():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    gateway = _gateway(handler, endpoint="https://script.google.com:notaport/x")

    for result in (
        asyncio.run(gateway.probe(timeout=1)),
        asyncio.run(gateway.submit(_submission())),
        asyncio.run(gateway.fetch_all()),
        asyncio.run(gateway.trigger_automation("processMissing")),
    ):
        assert isinstance(result, Err)
        assert result.kind == FailureKind.TRANSPORT


def test_trigger_automation_sends_action_and_ignores_response():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["params"] = dict(request.url.params)
        return httpx.Response(500, text="opaque")

    result = asyncio.run(_gateway(handler).trigger_automation("processMissing"))

    assert isinstance(result, Ok)
    assert result.data == Delivery.ACCEPTED_UNCONFIRMED
    assert seen["method"] == "GET"
    assert seen["params"]["action"] == "processMissing"
    assert seen["params"]["trigger_source"] == "web_interface"
    assert "timestamp" in seen["params"]


def test_trigger_automation_network_error_is_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    result = asyncio.run(_gateway(handler).trigger_automation("processMissing"))

    assert isinstance(result, Err)
    assert result.kind == FailureKind.TRANSPORT
