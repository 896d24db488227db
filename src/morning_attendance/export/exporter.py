from __future__ import annotations

import csv
import io
import json
from dataclasses import dataclass
from datetime import date, tzinfo
from typing import Sequence

from ..core.exceptions import ValidationError
from ..records.model import AttendanceEvent

# date, student id, name, status label, time
CSV_HEADERS = ["날짜", "학번", "이름", "구분", "시간"]

_MIMETYPES = {
    "csv": "text/csv; charset=utf-8",
    "json": "application/json",
}


@dataclass(frozen=True)
class ExportFile:
    filename: str
    content: bytes
    mimetype: str


def export_filename(fmt: str, *, prefix: str, today: date) -> str:
    return f"{prefix}_{today.isoformat()}.{fmt}"


def to_csv(events: Sequence[AttendanceEvent], *, tz: tzinfo) -> bytes:
    """CSV with a byte-order mark so spreadsheet apps keep Hangul intact."""

    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for e in events:
        local = e.timestamp.astimezone(tz)
        writer.writerow(
            [
                local.strftime("%Y-%m-%d"),
                e.student_id,
                e.student_name,
                e.status.label,
                local.strftime("%H:%M:%S"),
            ]
        )
    return out.getvalue().encode("utf-8-sig")


def to_json(events: Sequence[AttendanceEvent]) -> bytes:
    return json.dumps([e.to_dict() for e in events], ensure_ascii=False, indent=2).encode("utf-8")


def export_events(
    events: Sequence[AttendanceEvent],
    fmt: str,
    *,
    prefix: str,
    tz: tzinfo,
    today: date,
) -> ExportFile:
    fmt = (fmt or "").lower()
    if fmt not in _MIMETYPES:
        raise ValidationError(f"Unsupported export format: {fmt!r}")
    if not events:
        raise ValidationError("There is no attendance data to export")

    content = to_csv(events, tz=tz) if fmt == "csv" else to_json(events)
    return ExportFile(
        filename=export_filename(fmt, prefix=prefix, today=today),
        content=content,
        mimetype=_MIMETYPES[fmt],
    )
