from datetime import date, datetime, timedelta, timezone

import pytest

from courserep.core.exceptions import AlreadyClosedError, MissingFieldsError
from courserep.staff.models import AttendanceInstance
from courserep.staff.services.attendance_session import (
    AttendanceSessionService,
    SessionState,
    session_state,
)
from courserep.staff.services.tokens import AttendanceTokenService

from conftest import SECRET, create_course, run_with_session

NOW = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)


def make_instance(**overrides):
    fields = dict(
        instance_id="ATT_INT-000001",
        course_id="CSC101",
        date=date(2024, 6, 1),
        class_type="physical",
        latitude=6.5,
        longitude=3.3,
        qr_token="token",
        expires_at=NOW + timedelta(minutes=15),
        is_closed=False,
    )
    fields.update(overrides)
    return AttendanceInstance(**fields)


def test_state_is_open_before_expiry():
    assert session_state(make_instance(), NOW) is SessionState.open


def test_state_is_expired_after_expiry():
    assert session_state(make_instance(), NOW + timedelta(minutes=16)) is SessionState.expired


def test_closed_wins_over_expiry():
    instance = make_instance(is_closed=True, qr_token=None)
    assert session_state(instance, NOW) is SessionState.closed
    assert session_state(instance, NOW + timedelta(hours=1)) is SessionState.closed


def test_naive_expiry_is_treated_as_utc():
    instance = make_instance(expires_at=(NOW + timedelta(minutes=15)).replace(tzinfo=None))
    assert session_state(instance, NOW) is SessionState.open


def test_from_settings_uses_configured_rules(settings):
    service = AttendanceSessionService.from_settings(settings)

    assert service.radius_meters == settings.geofence_radius_meters
    assert service.audit_probability == settings.online_audit_probability
    assert service.tokens.ttl == timedelta(minutes=settings.attendance_token_ttl_minutes)


def test_close_is_terminal(client, settings):
    create_course(client, "CSC101")
    service = AttendanceSessionService(AttendanceTokenService(SECRET))

    async def initialize(session):
        created = await service.initialize(session, "CSC101", date(2024, 6, 1), "online")
        return created.instance_id

    instance_id = run_with_session(settings, initialize)

    async def close_twice(session):
        await service.close(session, instance_id)
        with pytest.raises(AlreadyClosedError):
            await service.close(session, instance_id)
        instance = await session.get(AttendanceInstance, instance_id)
        await session.refresh(instance)
        return instance.is_closed, instance.qr_token

    assert run_with_session(settings, close_twice) == (True, None)


def test_close_requires_instance_id(client, settings):
    service = AttendanceSessionService(AttendanceTokenService(SECRET))

    async def close_without_id(session):
        with pytest.raises(MissingFieldsError):
            await service.close(session, "")

    run_with_session(settings, close_without_id)
