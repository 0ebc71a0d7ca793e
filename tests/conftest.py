import asyncio

import pytest
from fastapi.testclient import TestClient

from courserep.core.config import Settings
from courserep.core.database import DatabaseManager
from courserep.main import create_app
from courserep.staff.services.attendance_session import AttendanceSessionService
from courserep.staff.services.tokens import AttendanceTokenService

SECRET = "test-secret-key"
CLASSROOM = (6.5, 3.3)


class StubRandom:
    """Always returns the same draw"""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'courserep.db'}",
        jwt_secret=SECRET,
        environment="test",
        log_level="WARNING",
        log_format="text",
        rate_limit_enabled=False,
        db_retry_attempts=1,
        db_retry_delay=0,
    )


@pytest.fixture
def client(settings):
    app = create_app(settings)
    # No random online audits unless a test asks for one
    app.state.attendance_service = AttendanceSessionService(
        AttendanceTokenService(SECRET), rng=StubRandom(0.99)
    )
    with TestClient(app) as test_client:
        yield test_client


def use_attendance_service(client, **kwargs) -> AttendanceSessionService:
    tokens = kwargs.pop("tokens", None) or AttendanceTokenService(SECRET)
    kwargs.setdefault("rng", StubRandom(0.99))
    service = AttendanceSessionService(tokens, **kwargs)
    client.app.state.attendance_service = service
    return service


def run_with_session(settings, operation):
    """Run operation(session) against the test database on a fresh engine"""

    async def scenario():
        db = DatabaseManager(settings)
        try:
            async with db.session_factory() as session:
                return await operation(session)
        finally:
            await db.close_connections()

    return asyncio.run(scenario())


def create_course(client, course_id="CSC101", **extra):
    payload = {
        "courseId": course_id,
        "courseName": f"Course {course_id}",
        "courseCode": course_id,
    }
    payload.update(extra)
    response = client.post("/course", json=payload)
    assert response.status_code == 201, response.json()
    return response.json()["data"]


def register_student(client, student_id, course_id=None, **extra):
    payload = {
        "studentId": student_id,
        "name": f"Student {student_id}",
        "email": f"{student_id.lower()}@uni.edu",
        "phone": "08000000000",
        "password": "secret123",
    }
    if course_id:
        payload["courseId"] = course_id
    payload.update(extra)
    response = client.post("/student/register", json=payload)
    assert response.status_code == 201, response.json()
    return response.json()["data"]
