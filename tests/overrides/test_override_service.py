from __future__ import annotations

from datetime import date, time, timedelta

import pytest

from class_attendance.core.enums import OverrideKind, OverrideStatus, Role
from class_attendance.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from class_attendance.overrides.model import NewOverrideRequest, OverrideDecisionRequest

from fakes import ADMIN_ID, TEACHER_ID, make_slot


def _request(on: date, **kw) -> NewOverrideRequest:
    values = dict(schedule_id=1, on=on, kind=OverrideKind.CANCEL, reason="Faculty meeting")
    values.update(kw)
    return NewOverrideRequest(**values)


def _create(world, on: date, **kw):
    return world.override_service.create_override(current_role=Role.TEACHER, teacher_id=TEACHER_ID, request=_request(on, **kw))


def test_teacher_creates_pending_override(world, monday):
    ov = _create(world, monday, kind=OverrideKind.TIME_CHANGE, requested_start_time=time(10, 0), requested_end_time=time(11, 0))

    assert ov.status == OverrideStatus.PENDING
    assert ov.requested_by == TEACHER_ID
    assert ov.requested_start_time == time(10, 0)
    # Pending requests do not change the session.
    assert world.resolver.resolve(1, monday).start_time == time(9, 0)


def test_admin_cannot_request_override(world, monday):
    with pytest.raises(AuthorizationError):
        world.override_service.create_override(current_role=Role.ADMIN, teacher_id=TEACHER_ID, request=_request(monday))


def test_teacher_cannot_override_someone_elses_slot(world, monday):
    world.schedules.add(make_slot(2, teacher_id=77))

    with pytest.raises(AuthorizationError):
        _create(world, monday, schedule_id=2)


def test_override_for_missing_slot(world, monday):
    with pytest.raises(NotFoundError):
        _create(world, monday, schedule_id=404)


@pytest.mark.parametrize(
    "kw",
    [
        {"reason": "   "},
        {"kind": OverrideKind.TIME_CHANGE, "requested_start_time": time(10, 0)},
        {"kind": OverrideKind.TIME_CHANGE, "requested_start_time": time(11, 0), "requested_end_time": time(10, 0)},
        {"kind": OverrideKind.CANCEL, "requested_start_time": time(10, 0), "requested_end_time": time(11, 0)},
    ],
)
def test_invalid_override_requests(world, monday, kw):
    with pytest.raises(ValidationError):
        _create(world, monday, **kw)


def test_override_date_must_fall_on_slot_weekday(world, monday):
    with pytest.raises(ValidationError) as exc:
        _create(world, monday + timedelta(days=1))

    assert "Monday" in str(exc.value)


def test_approve_applies_override(world, monday):
    ov = _create(world, monday)

    decided = world.override_service.approve(current_role=Role.ADMIN, admin_user_id=ADMIN_ID, override_id=ov.override_id, admin_notes="ok")

    assert decided.status == OverrideStatus.APPROVED
    assert decided.decided_by == ADMIN_ID
    assert decided.admin_notes == "ok"
    assert world.resolver.resolve(1, monday).cancelled


def test_reject_leaves_schedule_unchanged(world, monday):
    ov = _create(world, monday)

    decided = world.override_service.reject(current_role=Role.ADMIN, admin_user_id=ADMIN_ID, override_id=ov.override_id)

    assert decided.status == OverrideStatus.REJECTED
    assert not world.resolver.resolve(1, monday).cancelled


def test_decisions_are_terminal(world, monday):
    ov = _create(world, monday)
    world.override_service.reject(current_role=Role.ADMIN, admin_user_id=ADMIN_ID, override_id=ov.override_id)

    with pytest.raises(ConflictError):
        world.override_service.approve(current_role=Role.ADMIN, admin_user_id=ADMIN_ID, override_id=ov.override_id)


def test_at_most_one_approved_override_per_slot_and_date(world, monday):
    first = _create(world, monday)
    second = _create(world, monday, kind=OverrideKind.TIME_CHANGE, requested_start_time=time(10, 0), requested_end_time=time(11, 0))

    world.override_service.approve(current_role=Role.ADMIN, admin_user_id=ADMIN_ID, override_id=first.override_id)

    with pytest.raises(ConflictError):
        world.override_service.approve(current_role=Role.ADMIN, admin_user_id=ADMIN_ID, override_id=second.override_id)

    assert world.overrides.get(second.override_id).status == OverrideStatus.PENDING
    approved = [o for o in world.overrides.items.values() if o.status == OverrideStatus.APPROVED]
    assert len(approved) == 1


def test_cannot_request_when_approved_override_exists(world, monday):
    ov = _create(world, monday)
    world.override_service.approve(current_role=Role.ADMIN, admin_user_id=ADMIN_ID, override_id=ov.override_id)

    with pytest.raises(ConflictError):
        _create(world, monday)


def test_only_admin_decides(world, monday):
    ov = _create(world, monday)

    with pytest.raises(AuthorizationError):
        world.override_service.approve(current_role=Role.TEACHER, admin_user_id=TEACHER_ID, override_id=ov.override_id)


def test_decision_must_be_terminal_status(world, monday):
    ov = _create(world, monday)

    with pytest.raises(ValidationError):
        world.override_service.decide(
            current_role=Role.ADMIN,
            admin_user_id=ADMIN_ID,
            request=OverrideDecisionRequest(override_id=ov.override_id, decision=OverrideStatus.PENDING),
        )


def test_decide_missing_override(world):
    with pytest.raises(NotFoundError):
        world.override_service.approve(current_role=Role.ADMIN, admin_user_id=ADMIN_ID, override_id=999)


def test_lost_decision_race_is_conflict(world, monday):
    ov = _create(world, monday)
    # Another admin wins between the service's read and its conditional update.
    world.overrides.decide = lambda **kwargs: False

    with pytest.raises(ConflictError):
        world.override_service.approve(current_role=Role.ADMIN, admin_user_id=ADMIN_ID, override_id=ov.override_id)


def test_listings(world, monday):
    world.schedules.add(make_slot(2, teacher_id=77))
    mine = _create(world, monday)
    theirs = world.overrides.add(schedule_id=2, on=monday, kind=OverrideKind.CANCEL, status=OverrideStatus.PENDING)
    world.override_service.approve(current_role=Role.ADMIN, admin_user_id=ADMIN_ID, override_id=mine.override_id)

    teacher_ids = [o.override_id for o in world.override_service.list_for_teacher(teacher_id=TEACHER_ID)]
    pending_ids = [o.override_id for o in world.override_service.list_for_admin(status=OverrideStatus.PENDING)]
    all_ids = {o.override_id for o in world.override_service.list_for_admin()}

    assert teacher_ids == [mine.override_id]
    assert pending_ids == [theirs.override_id]
    assert all_ids == {mine.override_id, theirs.override_id}


def test_rows_flag_past_dates(world, monday):
    ov = _create(world, monday)

    rows = world.override_service.rows([ov], today=monday + timedelta(days=1))

    assert rows[0]["is_past_date"] is True
    assert rows[0]["status"] == "PENDING"
    assert world.override_service.rows([ov], today=monday)[0]["is_past_date"] is False
