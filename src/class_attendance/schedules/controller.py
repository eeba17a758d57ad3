from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import current_role, json_body, period_from, require_int
from ..common.validators import optional_text, parse_time
from ..container import Container
from ..core.exceptions import ValidationError
from .model import AudienceCriteria, NewScheduleSlot


def register(app: Flask, container: Container) -> None:
    @app.route("/api/schedules/<int:schedule_id>/session", methods=["GET"], endpoint="schedule_session")
    def schedule_session(schedule_id: int):
        on = parse_iso_date(request.args.get("date"))
        period = period_from(request.args, required=False)
        session = container.schedule_service.session_for(schedule_id=schedule_id, on=on, period=period)
        return jsonify(session.to_dict())

    @app.route("/api/teachers/<int:teacher_id>/schedule", methods=["GET"], endpoint="teacher_schedule")
    def teacher_schedule(teacher_id: int):
        on = parse_iso_date(request.args.get("date"))
        period = period_from(request.args)
        rows = container.schedule_service.teacher_day(teacher_id=teacher_id, on=on, period=period)
        return jsonify({"teacher_id": teacher_id, "date": on.isoformat(), "classes": [r.to_dict() for r in rows]})

    @app.route("/api/admin/schedules", methods=["POST"], endpoint="create_schedule")
    def create_schedule():
        role = current_role()
        payload = json_body()

        start_time = parse_time(payload.get("start_time"), "Start time")
        end_time = parse_time(payload.get("end_time"), "End time")
        if start_time is None or end_time is None:
            raise ValidationError("Start time and end time are required")

        schedule_id = container.schedule_service.create_slot(
            current_role=role,
            slot=NewScheduleSlot(
                teacher_id=require_int(payload, "teacher_id"),
                subject_id=require_int(payload, "subject_id"),
                day_of_week=require_int(payload, "day_of_week"),
                start_time=start_time,
                end_time=end_time,
                period=period_from(payload),
                room=optional_text(payload.get("room")),
                audience=AudienceCriteria(
                    department=optional_text(payload.get("department")),
                    year_level=optional_text(payload.get("year_level")),
                    section=optional_text(payload.get("section")),
                ),
            ),
        )
        return jsonify({"schedule_id": schedule_id}), 201

    @app.route("/api/admin/schedules/<int:schedule_id>/deactivate", methods=["POST"], endpoint="deactivate_schedule")
    def deactivate_schedule(schedule_id: int):
        container.schedule_service.deactivate_slot(current_role=current_role(), schedule_id=schedule_id)
        return jsonify({"schedule_id": schedule_id, "is_active": False})
