"""Staff Services Package"""
from .geofence import distance_meters, check_radius
from .tokens import AttendanceTokenService
from .qr_codes import display_code, instance_id_from_code, render_qr_data_url
from .attendance_session import (
    AttendanceSessionService,
    SessionState,
    get_attendance_service,
    session_state,
)

__all__ = [
    "distance_meters",
    "check_radius",
    "AttendanceTokenService",
    "display_code",
    "instance_id_from_code",
    "render_qr_data_url",
    "AttendanceSessionService",
    "SessionState",
    "get_attendance_service",
    "session_state",
]
