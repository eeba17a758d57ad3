from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date, parse_iso_datetime
from ..common.http import json_body, optional_int, period_from, require_int
from ..common.validators import require_non_empty
from ..container import Container
from .model import ScanRequest


def register(app: Flask, container: Container) -> None:
    @app.route("/api/scans", methods=["POST"], endpoint="record_scan")
    def record_scan():
        payload = json_body()

        raw_ts = payload.get("timestamp")
        scanned_at = parse_iso_datetime(str(raw_ts), tz_name=container.timezone) if raw_ts else None

        result = container.attendance_recorder.record_scan(
            ScanRequest(
                student_id=require_non_empty(str(payload.get("student_id") or ""), "student_id"),
                schedule_id=require_int(payload, "schedule_id"),
                period=period_from(payload),
                scanned_at=scanned_at,
                scanned_by=optional_int(payload, "scanned_by"),
            )
        )
        return jsonify(result.to_dict()), 201

    @app.route("/api/schedules/<int:schedule_id>/attendance", methods=["GET"], endpoint="schedule_attendance")
    def schedule_attendance(schedule_id: int):
        on = parse_iso_date(request.args.get("date"))
        rows = container.attendance_recorder.history(schedule_id=schedule_id, on=on, period=period_from(request.args))
        return jsonify({"schedule_id": schedule_id, "date": on.isoformat(), "records": [r.to_dict() for r in rows]})
