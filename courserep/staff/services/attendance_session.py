"""
Attendance session lifecycle: initialize, scan, close.

A session is Open until its token expires (Expired) or a representative
closes it (Closed, terminal). Scans are accepted only while Open, with the
token currently stored on the instance, and only after the location rule
for the class type has passed.
"""
import logging
import random
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Callable, List, Optional, Tuple

from fastapi import Request
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from courserep.core.config import Settings
from courserep.core.database import as_utc, with_db_transaction
from courserep.core.exceptions import (
    AlreadyClosedError,
    AlreadyMarkedError,
    BaseAppException,
    EmptyResultError,
    InternalError,
    LocationError,
    LocationRequiredError,
    MissingFieldsError,
    NotFoundError,
    OutOfRangeError,
    SessionClosedError,
    SessionExpiredError,
    TokenMismatchError,
    ValidationError,
)
from courserep.core.identifiers import generate_id
from courserep.core.logging_utils import log_business_event, log_security_event
from courserep.staff.models import (
    AttendanceInstance,
    AttendanceLog,
    AttendanceRecord,
    AttendanceStatus,
    ClassType,
    Course,
    SecurityLog,
    Student,
    StudentStatus,
)
from courserep.staff.services.geofence import check_radius
from courserep.staff.services.qr_codes import (
    display_code,
    instance_id_from_code,
    render_qr_data_url,
)
from courserep.staff.services.tokens import AttendanceTokenService

logger = logging.getLogger(__name__)

INSTANCE_PREFIX = "ATT_INT"
RECORD_PREFIX = "ATT"


class SessionState(str, Enum):
    open = "open"
    expired = "expired"
    closed = "closed"


def session_state(instance: AttendanceInstance, now: datetime) -> SessionState:
    if instance.is_closed:
        return SessionState.closed
    if now > as_utc(instance.expires_at):
        return SessionState.expired
    return SessionState.open


@dataclass
class InitializedSession:
    instance_id: str
    course_id: str
    date: date
    class_type: str
    expires_at: datetime
    token: str
    qr_code: str
    qr_image: str
    records_created: int


@dataclass
class ScanResult:
    instance_id: str
    student_id: str
    record_id: str
    location_checked: bool
    location_valid: bool
    message: str


@dataclass
class _LocationVerdict:
    checked: bool = False
    valid: bool = False
    message: str = ""
    rejection: Optional[LocationError] = None
    event_type: str = "location_verification_failed"


class AttendanceSessionService:
    def __init__(
        self,
        tokens: AttendanceTokenService,
        radius_meters: float = 50.0,
        audit_probability: float = 0.2,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.tokens = tokens
        self.radius_meters = radius_meters
        self.audit_probability = audit_probability
        self.rng = rng or random.Random()
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    @classmethod
    def from_settings(cls, settings: Settings) -> "AttendanceSessionService":
        tokens = AttendanceTokenService(
            settings.jwt_secret,
            ttl=timedelta(minutes=settings.attendance_token_ttl_minutes),
        )
        return cls(
            tokens,
            radius_meters=settings.geofence_radius_meters,
            audit_probability=settings.online_audit_probability,
        )

    # === initialize ===

    async def initialize(
        self,
        session: AsyncSession,
        course_id: Optional[str],
        session_date: Optional[date],
        class_type: Optional[str],
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> InitializedSession:
        if not course_id or not session_date or not class_type:
            raise MissingFieldsError(
                "Course ID, date, and class type are required",
                [
                    name
                    for name, value in (
                        ("courseId", course_id),
                        ("date", session_date),
                        ("classType", class_type),
                    )
                    if not value
                ],
            )

        if class_type not in (ClassType.physical.value, ClassType.online.value):
            raise ValidationError('Invalid class type. Must be "physical" or "online"')

        if class_type == ClassType.physical.value:
            if latitude is None or longitude is None:
                raise MissingFieldsError(
                    "Location coordinates are required for physical classes",
                    ["latitude", "longitude"],
                )
        else:
            latitude = latitude if latitude is not None else 0.0
            longitude = longitude if longitude is not None else 0.0

        async def _create(session: AsyncSession) -> Tuple[AttendanceInstance, str, int]:
            course = await session.get(Course, course_id)
            if course is None:
                raise NotFoundError("Course not found", {"courseId": course_id})

            instance_id = await generate_id(session, INSTANCE_PREFIX)
            token, expires_at = self.tokens.issue(
                {
                    "courseId": course_id,
                    "instanceId": instance_id,
                    "classType": class_type,
                    "latitude": float(latitude),
                    "longitude": float(longitude),
                }
            )

            instance = AttendanceInstance(
                instance_id=instance_id,
                course_id=course_id,
                date=session_date,
                class_type=class_type,
                latitude=latitude,
                longitude=longitude,
                qr_token=token,
                expires_at=expires_at,
                is_closed=False,
            )
            session.add(instance)
            await session.flush()

            result = await session.execute(
                select(Student.student_id).where(
                    Student.course_id == course_id,
                    Student.status == StudentStatus.active.value,
                )
            )
            student_ids = result.scalars().all()

            for student_id in student_ids:
                session.add(
                    AttendanceRecord(
                        record_id=await generate_id(session, RECORD_PREFIX),
                        instance_id=instance_id,
                        course_id=course_id,
                        student_id=student_id,
                        date=session_date,
                        status=AttendanceStatus.absent.value,
                    )
                )
            await session.flush()

            return instance, token, len(student_ids)

        try:
            instance, token, records_created = await with_db_transaction(
                session, _create
            )
        except BaseAppException:
            raise
        except Exception as e:
            logger.error(f"Error initializing attendance: {str(e)}", exc_info=True)
            raise InternalError("Error initializing attendance")

        code = display_code(instance.instance_id)
        log_business_event(
            "attendance_initialized",
            "attendance_instance",
            instance.instance_id,
            {
                "course_id": course_id,
                "class_type": class_type,
                "records_created": records_created,
            },
        )

        return InitializedSession(
            instance_id=instance.instance_id,
            course_id=course_id,
            date=session_date,
            class_type=class_type,
            expires_at=as_utc(instance.expires_at),
            token=token,
            qr_code=code,
            qr_image=render_qr_data_url(code),
            records_created=records_created,
        )

    # === close ===

    async def close(self, session: AsyncSession, instance_id: Optional[str]) -> None:
        if not instance_id:
            raise MissingFieldsError("Instance ID required", ["instanceId"])

        instance = await session.get(AttendanceInstance, instance_id)
        if instance is None:
            raise NotFoundError("Attendance not found", {"instanceId": instance_id})

        if instance.is_closed:
            raise AlreadyClosedError()

        # Compare-and-set: a concurrent close loses here instead of double closing
        result = await session.execute(
            update(AttendanceInstance)
            .where(
                AttendanceInstance.instance_id == instance_id,
                AttendanceInstance.is_closed.is_(False),
            )
            .values(is_closed=True, qr_token=None)
        )
        if result.rowcount == 0:
            await session.rollback()
            raise AlreadyClosedError()

        await session.commit()
        log_business_event("attendance_closed", "attendance_instance", instance_id)

    # === scan ===

    async def scan(
        self,
        session: AsyncSession,
        token: Optional[str],
        student_id: Optional[str],
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> ScanResult:
        if not token or not student_id:
            raise MissingFieldsError(
                "Student ID and token are required",
                [n for n, v in (("studentId", student_id), ("token", token)) if not v],
            )

        claims = self.tokens.verify(token)

        try:
            result = await self._mark_present(
                session, claims, token, student_id, latitude, longitude
            )
            await session.commit()
        except Exception:
            await session.rollback()
            raise

        log_business_event(
            "attendance_marked",
            "attendance_instance",
            result.instance_id,
            {
                "student_id": student_id,
                "location_checked": result.location_checked,
                "location_valid": result.location_valid,
            },
        )
        return result

    async def _mark_present(
        self,
        session: AsyncSession,
        claims: dict,
        token: str,
        student_id: str,
        latitude: Optional[float],
        longitude: Optional[float],
    ) -> ScanResult:
        # Row lock keeps a concurrent close from slipping between the
        # token comparison and the record update
        result = await session.execute(
            select(AttendanceInstance)
            .where(
                AttendanceInstance.instance_id == claims["instanceId"],
                AttendanceInstance.course_id == claims["courseId"],
            )
            .with_for_update()
        )
        instance = result.scalar_one_or_none()

        if instance is None:
            raise NotFoundError("Attendance session not found")

        state = session_state(instance, self.clock())
        if state is SessionState.closed:
            raise SessionClosedError()
        if state is SessionState.expired:
            raise SessionExpiredError()

        if instance.qr_token != token:
            raise TokenMismatchError()

        verdict = self._check_location(instance, latitude, longitude)
        if verdict.rejection is not None:
            await self._reject(session, student_id, instance, verdict)

        result = await session.execute(
            select(AttendanceRecord)
            .where(
                AttendanceRecord.instance_id == instance.instance_id,
                AttendanceRecord.student_id == student_id,
            )
            .with_for_update()
        )
        record = result.scalar_one_or_none()

        if record is not None and record.status == AttendanceStatus.present.value:
            raise AlreadyMarkedError()

        now = self.clock()
        if record is None:
            # Student joined the course after the session was initialized
            if await session.get(Student, student_id) is None:
                raise NotFoundError("Student not found", {"studentId": student_id})
            record = AttendanceRecord(
                record_id=await generate_id(session, RECORD_PREFIX),
                instance_id=instance.instance_id,
                course_id=instance.course_id,
                student_id=student_id,
                date=instance.date,
            )
            session.add(record)

        record.status = AttendanceStatus.present.value
        record.marked_at = now

        session.add(
            AttendanceLog(
                student_id=student_id,
                instance_id=instance.instance_id,
                location_checked=verdict.checked,
                location_valid=verdict.valid,
                details=verdict.message,
            )
        )
        await session.flush()

        return ScanResult(
            instance_id=instance.instance_id,
            student_id=student_id,
            record_id=record.record_id,
            location_checked=verdict.checked,
            location_valid=verdict.valid,
            message=f"Attendance marked successfully. {verdict.message}".strip(),
        )

    def _check_location(
        self,
        instance: AttendanceInstance,
        latitude: Optional[float],
        longitude: Optional[float],
    ) -> _LocationVerdict:
        has_location = latitude is not None and longitude is not None

        if instance.class_type == ClassType.physical.value:
            if not has_location:
                return _LocationVerdict(
                    checked=True,
                    rejection=LocationRequiredError(),
                    message="Location coordinates are required",
                    event_type="location_missing",
                )

            distance, inside = check_radius(
                (instance.latitude, instance.longitude),
                (latitude, longitude),
                self.radius_meters,
            )
            if inside:
                return _LocationVerdict(
                    checked=True, valid=True, message="Location verified."
                )

            rejection = OutOfRangeError(distance, self.radius_meters)
            return _LocationVerdict(
                checked=True, rejection=rejection, message=rejection.message
            )

        # Online sessions: random compliance spot-check, any coordinates pass
        if self.rng.random() < self.audit_probability:
            if not has_location:
                return _LocationVerdict(
                    checked=True,
                    rejection=LocationRequiredError("Random location check required"),
                    message="Random location check required",
                    event_type="random_location_check_failed",
                )
            return _LocationVerdict(
                checked=True, valid=True, message="Random location check completed."
            )

        return _LocationVerdict()

    async def _reject(
        self,
        session: AsyncSession,
        student_id: str,
        instance: AttendanceInstance,
        verdict: _LocationVerdict,
    ):
        """Persist the security log entry, then fail the scan"""
        session.add(
            SecurityLog(
                student_id=student_id,
                instance_id=instance.instance_id,
                event_type=verdict.event_type,
                details=verdict.message,
            )
        )
        await session.commit()

        log_security_event(
            verdict.event_type, student_id, instance.instance_id, verdict.message
        )
        raise verdict.rejection

    # === listing / lookup ===

    async def list_instances(self, session: AsyncSession) -> List[AttendanceInstance]:
        result = await session.execute(
            select(AttendanceInstance).order_by(
                AttendanceInstance.date.desc(), AttendanceInstance.instance_id.desc()
            )
        )
        instances = result.scalars().all()
        if not instances:
            raise EmptyResultError("No instance was found", status_code=400)
        return instances

    async def delete_instance(self, session: AsyncSession, instance_id: str) -> None:
        """Hard delete; the instance's records go with it"""
        instance = await session.get(AttendanceInstance, instance_id)
        if instance is None:
            raise NotFoundError("Instance not found", {"instanceId": instance_id})

        await session.delete(instance)
        await session.commit()
        log_business_event("attendance_deleted", "attendance_instance", instance_id)

    async def resolve_code(self, session: AsyncSession, code: str) -> AttendanceInstance:
        """Map a scanned ATT-<id> display code to its open instance"""
        instance = await session.get(AttendanceInstance, instance_id_from_code(code))
        if instance is None:
            raise NotFoundError("Attendance session not found")

        state = session_state(instance, self.clock())
        if state is SessionState.closed:
            raise SessionClosedError()
        if state is SessionState.expired:
            raise SessionExpiredError()
        return instance


def get_attendance_service(request: Request) -> AttendanceSessionService:
    return request.app.state.attendance_service
