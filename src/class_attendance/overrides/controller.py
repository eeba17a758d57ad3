from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.http import current_role, json_body, require_int
from ..common.validators import optional_text, parse_time
from ..container import Container
from ..core.enums import OverrideKind, OverrideStatus
from ..core.exceptions import ValidationError
from .model import NewOverrideRequest, OverrideDecisionRequest


def _parse_enum(enum_cls, value, field_name: str):
    try:
        return enum_cls(str(value or "").strip().upper())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


def register(app: Flask, container: Container) -> None:
    def _today():
        return now_local(container.timezone).date()

    @app.route("/api/schedule-overrides", methods=["POST"], endpoint="create_schedule_override")
    def create_schedule_override():
        role = current_role()
        payload = json_body()

        override = container.override_service.create_override(
            current_role=role,
            teacher_id=require_int(payload, "teacher_id"),
            request=NewOverrideRequest(
                schedule_id=require_int(payload, "schedule_id"),
                on=parse_iso_date(payload.get("date")),
                kind=_parse_enum(OverrideKind, payload.get("kind"), "kind"),
                reason=payload.get("reason") or "",
                requested_start_time=parse_time(payload.get("requested_start_time"), "Requested start time"),
                requested_end_time=parse_time(payload.get("requested_end_time"), "Requested end time"),
            ),
        )
        return jsonify(override.to_dict(today=_today())), 201

    @app.route("/api/teachers/<int:teacher_id>/schedule-overrides", methods=["GET"], endpoint="teacher_schedule_overrides")
    def teacher_schedule_overrides(teacher_id: int):
        rows = container.override_service.list_for_teacher(teacher_id=teacher_id)
        return jsonify({"overrides": container.override_service.rows(rows, today=_today())})

    @app.route("/api/admin/schedule-overrides", methods=["GET"], endpoint="admin_schedule_overrides")
    def admin_schedule_overrides():
        raw_status = request.args.get("status")
        status = _parse_enum(OverrideStatus, raw_status, "status") if raw_status else None
        rows = container.override_service.list_for_admin(status=status)
        return jsonify({"overrides": container.override_service.rows(rows, today=_today())})

    @app.route(
        "/api/admin/schedule-overrides/<int:override_id>/decision",
        methods=["POST"],
        endpoint="decide_schedule_override",
    )
    def decide_schedule_override(override_id: int):
        role = current_role()
        payload = json_body()

        override = container.override_service.decide(
            current_role=role,
            admin_user_id=require_int(payload, "admin_user_id"),
            request=OverrideDecisionRequest(
                override_id=override_id,
                decision=_parse_enum(OverrideStatus, payload.get("decision"), "decision"),
                admin_notes=optional_text(payload.get("admin_notes")),
            ),
        )
        return jsonify(override.to_dict(today=_today()))
