from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date, parse_timestamp
from ..container import Container
from ..core.constants import DEFAULT_AUTOMATION_ACTION
from ..core.enums import FailureKind
from ..core.exceptions import DomainError, ValidationError
from ..core.result import Err, Result, to_payload

logger = logging.getLogger(__name__)

_HTTP_STATUS = {
    FailureKind.VALIDATION: 400,
    FailureKind.PARSE: 502,
    FailureKind.TRANSPORT: 503,
    FailureKind.PERSISTENCE: 500,
}


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def _respond(result: Result[Any], to_data: Optional[Callable[[Any], Any]] = None):
        if isinstance(result, Err):
            return jsonify(to_payload(result)), _HTTP_STATUS[result.kind]
        data = to_data(result.data) if to_data else result.data
        return jsonify(to_payload(result, data)), 200

    def _bad_request(message: str):
        return jsonify({"success": False, "error": FailureKind.VALIDATION.value, "message": message}), 400

    def _date_arg(name: str = "date") -> Optional[date]:
        value = (request.args.get(name) or "").strip()
        if not value:
            return None
        try:
            return parse_iso_date(value)
        except ValueError:
            raise ValidationError("Date must be YYYY-MM-DD")

    @app.errorhandler(ValidationError)
    def _validation_error(e: ValidationError):
        return _bad_request(str(e))

    @app.route("/api/attendance", methods=["GET"], endpoint="api_attendance_list")
    async def attendance_list():
        result = await service.get_attendance_data(
            on_date=_date_arg(),
            student_id=(request.args.get("student_id") or "").strip() or None,
        )
        return _respond(result, lambda merged: merged.to_dict())

    @app.route("/api/attendance", methods=["POST"], endpoint="api_attendance_submit")
    async def attendance_submit():
        body = request.get_json(silent=True) or {}
        raw_ts = (body.get("timestamp") or "").strip()
        try:
            timestamp = parse_timestamp(raw_ts, container.tz) if raw_ts else None
        except ValueError:
            return _bad_request("Timestamp must be ISO-8601")

        result = await service.submit(
            student_id=str(body.get("studentId") or ""),
            student_name=str(body.get("studentName") or ""),
            status=str(body.get("status") or ""),
            timestamp=timestamp,
        )
        return _respond(result, lambda event: event.to_dict())

    @app.route("/api/attendance", methods=["DELETE"], endpoint="api_attendance_clear")
    def attendance_clear():
        return _respond(service.clear_local_data())

    @app.route("/api/stats/today", methods=["GET"], endpoint="api_stats_today")
    async def stats_today():
        return _respond(await service.get_today_stats(_date_arg()), lambda stats: stats.to_dict())

    @app.route("/api/stats/weekly", methods=["GET"], endpoint="api_stats_weekly")
    async def stats_weekly():
        return _respond(await service.get_weekly_stats(), lambda trend: [d.to_dict() for d in trend])

    @app.route("/api/backfill", methods=["GET"], endpoint="api_backfill_preview")
    async def backfill_preview():
        result = await service.process_missing_data(_date_arg())
        return _respond(result, lambda records: [r.to_dict() for r in records])

    @app.route("/api/backfill", methods=["POST"], endpoint="api_backfill_commit")
    async def backfill_commit():
        body = request.get_json(silent=True) or {}
        raw_day = (body.get("date") or "").strip()
        try:
            day = parse_iso_date(raw_day) if raw_day else None
        except ValueError:
            return _bad_request("Date must be YYYY-MM-DD")

        preview = await service.process_missing_data(day)
        if isinstance(preview, Err):
            return _respond(preview)
        return _respond(service.commit_backfill(preview.data), lambda events: [e.to_dict() for e in events])

    @app.route("/api/sync", methods=["POST"], endpoint="api_sync")
    async def sync():
        return _respond(await service.sync_pending(), lambda report: report.to_dict())

    @app.route("/api/students", methods=["GET"], endpoint="api_students")
    async def students():
        result = await container.student_directory.get_student_list()
        return _respond(
            result,
            lambda roster: {
                "students": [s.to_dict() for s in roster.students],
                "source": roster.source.value,
            },
        )

    @app.route("/api/students/<student_id>", methods=["GET"], endpoint="api_student")
    async def student(student_id: str):
        result = await container.student_directory.get_student(student_id)
        return _respond(result, lambda s: s.to_dict())

    @app.route("/api/students/<student_id>/history", methods=["GET"], endpoint="api_student_history")
    async def student_history(student_id: str):
        result = await service.get_student_history(student_id)
        return _respond(result, lambda merged: merged.to_dict())

    @app.route("/api/connection", methods=["GET"], endpoint="api_connection")
    async def connection():
        status = await service.check_connection()
        return jsonify({"success": True, "data": status.to_dict()}), 200

    @app.route("/api/connection", methods=["POST"], endpoint="api_connection_configure")
    async def connection_configure():
        body = request.get_json(silent=True) or {}
        return _respond(await service.configure_endpoint(str(body.get("url") or "")))

    @app.route("/api/automation", methods=["POST"], endpoint="api_automation")
    async def automation():
        body = request.get_json(silent=True) or {}
        action = str(body.get("type") or DEFAULT_AUTOMATION_ACTION)
        return _respond(await service.trigger_automation(action), lambda delivery: delivery.value)

    @app.route("/api/export/<fmt>", methods=["GET"], endpoint="api_export")
    def export(fmt: str):
        try:
            exported = service.export_data(fmt)
        except ValidationError as e:
            return _bad_request(str(e))
        except DomainError as e:
            logger.exception("Export failed")
            return jsonify({"success": False, "error": FailureKind.PERSISTENCE.value, "message": str(e)}), 500

        return app.response_class(
            exported.content,
            mimetype=exported.mimetype,
            headers={"Content-Disposition": f"attachment; filename={exported.filename}"},
        )

    @app.route("/api/system", methods=["GET"], endpoint="api_system")
    def system():
        return _respond(service.get_system_info())
