import dataclasses
from datetime import datetime, timedelta, timezone

from sqlalchemy import func
from sqlalchemy.future import select
from fastapi.testclient import TestClient

from courserep.core.identifiers import IdSequence
from courserep.core.limits import limiter
from courserep.core.security import hash_password
from courserep.main import create_app
from courserep.staff.models import (
    AttendanceInstance,
    AttendanceLog,
    AttendanceRecord,
    SecurityLog,
    Student,
)
from courserep.staff.services import attendance_session
from courserep.staff.services.attendance_session import AttendanceSessionService
from courserep.staff.services.tokens import AttendanceTokenService

from conftest import (
    CLASSROOM,
    SECRET,
    StubRandom,
    create_course,
    register_student,
    run_with_session,
    use_attendance_service,
)


def seed_course(client):
    create_course(client, "CSC101")
    create_course(client, "MTH101")
    register_student(client, "S1", "CSC101")
    register_student(client, "S2", "CSC101")
    register_student(client, "S3", "CSC101")
    register_student(client, "S4", "MTH101")
    response = client.put("/student/S3", json={"status": "inactive"})
    assert response.status_code == 200


def initialize(client, class_type="physical", lat=CLASSROOM[0], lon=CLASSROOM[1], course_id="CSC101"):
    payload = {"courseId": course_id, "date": "2024-06-01", "classType": class_type}
    if lat is not None:
        payload["latitude"] = lat
    if lon is not None:
        payload["longitude"] = lon
    return client.post("/attendance/initialize", json=payload)


def open_session(client, **kwargs):
    response = initialize(client, **kwargs)
    assert response.status_code == 201, response.json()
    data = response.json()["data"]
    resolved = client.get(f"/attendance/code/{data['qrCode']}")
    assert resolved.status_code == 200, resolved.json()
    return data, resolved.json()["data"]["token"]


def scan(client, token, student_id, lat=None, lon=None):
    payload = {"studentId": student_id}
    if lat is not None:
        payload["latitude"] = lat
    if lon is not None:
        payload["longitude"] = lon
    return client.post("/attendance/auto-mark", params={"token": token}, json=payload)


def records_for(client, instance_id):
    response = client.get("/attendance/records", params={"instanceId": instance_id})
    assert response.status_code == 200, response.json()
    return response.json()["data"]


def count_rows(settings, model, *conditions):
    async def operation(session):
        query = select(func.count()).select_from(model)
        if conditions:
            query = query.where(*conditions)
        return (await session.execute(query)).scalar()

    return run_with_session(settings, operation)


# === initialize ===

def test_physical_without_coordinates_is_409_and_creates_nothing(client, settings):
    seed_course(client)

    for lat, lon in ((None, None), (6.5, None), (None, 3.3)):
        response = initialize(client, lat=lat, lon=lon)
        assert response.status_code == 409
        assert response.json()["success"] is False

    assert count_rows(settings, AttendanceInstance) == 0
    assert client.get("/attendance").status_code == 400


def test_invalid_class_type_is_400(client):
    seed_course(client)

    response = initialize(client, class_type="hybrid")

    assert response.status_code == 400
    assert response.json()["message"] == 'Invalid class type. Must be "physical" or "online"'


def test_missing_required_fields_is_409(client):
    response = client.post("/attendance/initialize", json={"classType": "online"})

    assert response.status_code == 409
    assert response.json()["message"] == "Course ID, date, and class type are required"
    assert set(response.json()["details"]["fields"]) == {"courseId", "date"}


def test_unknown_field_is_rejected(client):
    seed_course(client)

    response = client.post(
        "/attendance/initialize",
        json={"courseId": "CSC101", "date": "2024-06-01", "classType": "online", "room": "B2"},
    )

    assert response.status_code == 400


def test_initialize_creates_absent_record_per_active_student(client):
    seed_course(client)

    response = initialize(client)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["attendanceInstanceId"].startswith("ATT_INT-")
    assert data["qrCode"] == f"ATT-{data['attendanceInstanceId']}"
    assert data["qrImage"].startswith("data:image/png;base64,")
    assert data["classType"] == "physical"
    assert data["courseId"] == "CSC101"
    assert "token" not in data

    records = records_for(client, data["attendanceInstanceId"])
    assert sorted(r["studentId"] for r in records) == ["S1", "S2"]
    assert all(r["status"] == "absent" for r in records)
    assert all(r["recordId"].startswith("ATT-") for r in records)


def test_online_session_defaults_to_origin(client):
    seed_course(client)

    response = initialize(client, class_type="online", lat=None, lon=None)

    assert response.status_code == 201
    instances = client.get("/attendance").json()["data"]
    assert instances[0]["latitude"] == 0
    assert instances[0]["longitude"] == 0
    assert instances[0]["state"] == "open"


def test_unknown_course_is_404(client):
    response = initialize(client, course_id="NOPE")

    assert response.status_code == 404


# === scan ===

def test_example_scan_then_duplicate(client, settings):
    seed_course(client)
    data, token = open_session(client)

    first = scan(client, token, "S1", 6.5002, 3.3001)
    assert first.status_code == 200, first.json()
    assert first.json()["message"] == "Attendance marked successfully. Location verified."
    assert first.json()["data"]["locationChecked"] is True
    assert first.json()["data"]["locationValid"] is True

    second = scan(client, token, "S1", 6.5002, 3.3001)
    assert second.status_code == 409
    assert second.json()["message"] == "Attendance already marked"

    records = records_for(client, data["attendanceInstanceId"])
    statuses = {r["studentId"]: r["status"] for r in records}
    assert statuses == {"S1": "present", "S2": "absent"}
    assert count_rows(settings, AttendanceLog) == 1


def test_out_of_range_scan_is_403_and_logged(client, settings):
    seed_course(client)
    data, token = open_session(client)

    response = scan(client, token, "S2", 6.51, 3.3)

    assert response.status_code == 403
    body = response.json()
    assert body["message"].startswith("You must be within 50m of the classroom (")
    assert body["details"]["distance"] > 50
    assert f"({body['details']['distance']}m away)" in body["message"]
    assert count_rows(settings, SecurityLog, SecurityLog.student_id == "S2") == 1

    statuses = {r["studentId"]: r["status"] for r in records_for(client, data["attendanceInstanceId"])}
    assert statuses["S2"] == "absent"


def test_scan_inside_radius_edge_is_accepted(client):
    seed_course(client)
    _, token = open_session(client)

    # About 44m east of the classroom
    response = scan(client, token, "S1", 6.5, 3.3004)

    assert response.status_code == 200, response.json()
    assert response.json()["data"]["locationValid"] is True


def test_scan_just_outside_radius_is_rejected(client, settings):
    seed_course(client)
    _, token = open_session(client)

    response = scan(client, token, "S2", 6.5, 3.3005)

    assert response.status_code == 403
    body = response.json()
    assert body["message"] == "You must be within 50m of the classroom (55m away)"
    assert body["details"]["distance"] == 55
    assert count_rows(settings, SecurityLog, SecurityLog.student_id == "S2") == 1


def test_physical_scan_without_location_is_409(client, settings):
    seed_course(client)
    _, token = open_session(client)

    response = scan(client, token, "S1")

    assert response.status_code == 409
    assert response.json()["message"] == "Location coordinates are required"
    assert count_rows(settings, SecurityLog, SecurityLog.event_type == "location_missing") == 1


def test_scan_requires_token_and_student(client):
    response = client.post("/attendance/auto-mark", json={"studentId": "S1"})
    assert response.status_code == 409
    assert response.json()["message"] == "Student ID and token are required"

    response = client.post("/attendance/auto-mark", params={"token": "abc"}, json={})
    assert response.status_code == 409


def test_invalid_token_is_401(client):
    seed_course(client)
    open_session(client)

    response = scan(client, "garbage.token.value", "S1", *CLASSROOM)

    assert response.status_code == 401


def test_expired_token_is_410_even_at_the_classroom(client):
    seed_course(client)
    past = datetime.now(timezone.utc) - timedelta(minutes=20)
    use_attendance_service(client, tokens=AttendanceTokenService(SECRET, clock=lambda: past))
    response = initialize(client)
    assert response.status_code == 201
    instance_id = response.json()["data"]["attendanceInstanceId"]

    use_attendance_service(client)
    resolved = client.get(f"/attendance/code/ATT-{instance_id}")
    assert resolved.status_code == 410

    expired_token, _ = AttendanceTokenService(SECRET, clock=lambda: past).issue(
        {"courseId": "CSC101", "instanceId": instance_id, "classType": "physical"}
    )
    response = scan(client, expired_token, "S1", *CLASSROOM)
    assert response.status_code == 410


def test_session_expired_by_stored_expiry_is_410(client):
    seed_course(client)
    _, token = open_session(client)

    later = datetime.now(timezone.utc) + timedelta(minutes=16)
    service = use_attendance_service(client)
    service.clock = lambda: later

    response = scan(client, token, "S1", *CLASSROOM)

    assert response.status_code == 410
    assert response.json()["message"] == "Attendance session has expired"


def test_token_not_matching_stored_token_is_401(client):
    seed_course(client)
    data, _ = open_session(client)

    other = datetime.now(timezone.utc) - timedelta(seconds=30)
    forged, _ = AttendanceTokenService(SECRET, clock=lambda: other).issue(
        {
            "courseId": "CSC101",
            "instanceId": data["attendanceInstanceId"],
            "classType": "physical",
            "latitude": 6.5,
            "longitude": 3.3,
        }
    )

    response = scan(client, forged, "S1", *CLASSROOM)

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid attendance token"


def test_token_for_unknown_instance_is_404(client):
    seed_course(client)
    token, _ = AttendanceTokenService(SECRET).issue(
        {"courseId": "CSC101", "instanceId": "ATT_INT-999999", "classType": "online"}
    )

    response = scan(client, token, "S1")

    assert response.status_code == 404


def test_malformed_token_payload_is_400(client):
    token, _ = AttendanceTokenService(SECRET).issue({"courseId": "CSC101"})

    response = scan(client, token, "S1", *CLASSROOM)

    assert response.status_code == 400


def test_student_without_record_gets_one_on_scan(client):
    seed_course(client)
    data, token = open_session(client, class_type="online", lat=None, lon=None)

    response = scan(client, token, "S4")

    assert response.status_code == 200
    statuses = {r["studentId"]: r["status"] for r in records_for(client, data["attendanceInstanceId"])}
    assert statuses["S4"] == "present"


def test_unknown_student_is_404(client):
    seed_course(client)
    _, token = open_session(client, class_type="online", lat=None, lon=None)

    response = scan(client, token, "GHOST")

    assert response.status_code == 404


# === online audit ===

def test_online_without_audit_needs_no_location(client):
    seed_course(client)
    _, token = open_session(client, class_type="online", lat=None, lon=None)

    response = scan(client, token, "S1")

    assert response.status_code == 200
    assert response.json()["message"] == "Attendance marked successfully."
    assert response.json()["data"]["locationChecked"] is False


def test_online_audit_requires_coordinates(client, settings):
    seed_course(client)
    _, token = open_session(client, class_type="online", lat=None, lon=None)
    use_attendance_service(client, rng=StubRandom(0.0))

    response = scan(client, token, "S1")
    assert response.status_code == 409
    assert response.json()["message"] == "Random location check required"
    assert count_rows(settings, SecurityLog) == 1

    # Any coordinates satisfy the audit, no distance check
    response = scan(client, token, "S1", 51.5, -0.12)
    assert response.status_code == 200
    assert response.json()["message"] == (
        "Attendance marked successfully. Random location check completed."
    )
    assert response.json()["data"]["locationValid"] is True


# === close ===

def test_close_then_scan_and_close_again(client):
    seed_course(client)
    data, token = open_session(client)
    instance_id = data["attendanceInstanceId"]

    response = client.post("/attendance/close", params={"instanceId": instance_id})
    assert response.status_code == 200

    again = client.post("/attendance/close", params={"instanceId": instance_id})
    assert again.status_code == 401
    assert again.json()["message"] == "Attendance already closed"

    response = scan(client, token, "S1", *CLASSROOM)
    assert response.status_code == 410
    assert response.json()["message"] == "Attendance session is closed"

    assert client.get(f"/attendance/code/{data['qrCode']}").status_code == 410

    instances = client.get("/attendance").json()["data"]
    assert instances[0]["isClosed"] is True
    assert instances[0]["state"] == "closed"


def test_close_validation(client):
    assert client.post("/attendance/close").status_code == 409
    response = client.post("/attendance/close", params={"instanceId": "ATT_INT-404404"})
    assert response.status_code == 404
    assert response.json()["message"] == "Attendance not found"


# === list / delete ===

def test_list_empty_is_400(client):
    response = client.get("/attendance")

    assert response.status_code == 400
    assert response.json()["message"] == "No instance was found"


def test_delete_instance_removes_its_records(client, settings):
    seed_course(client)
    data, token = open_session(client)
    instance_id = data["attendanceInstanceId"]
    assert scan(client, token, "S1", *CLASSROOM).status_code == 200

    response = client.delete(f"/attendance/instance/{instance_id}")
    assert response.status_code == 200

    assert client.get("/attendance/records", params={"instanceId": instance_id}).status_code == 400
    # Audit trail survives the session
    assert count_rows(settings, AttendanceLog) == 1

    assert client.delete(f"/attendance/instance/{instance_id}").status_code == 404


# === manual marking ===

def test_manual_mark(client):
    seed_course(client)
    data, _ = open_session(client)
    record = next(
        r for r in records_for(client, data["attendanceInstanceId"]) if r["studentId"] == "S2"
    )

    response = client.post("/attendance/mark", json={"recordId": record["recordId"], "studentId": "S2"})
    assert response.status_code == 202
    assert response.json()["data"]["status"] == "present"

    again = client.post("/attendance/mark", json={"recordId": record["recordId"], "studentId": "S2"})
    assert again.status_code == 409

    wrong = client.post("/attendance/mark", json={"recordId": record["recordId"], "studentId": "S1"})
    assert wrong.status_code == 404


def test_delete_record(client):
    seed_course(client)
    data, _ = open_session(client)
    record = records_for(client, data["attendanceInstanceId"])[0]

    assert client.delete(f"/attendance/records/{record['recordId']}").status_code == 200
    assert client.delete(f"/attendance/records/{record['recordId']}").status_code == 404


def test_records_filter_by_student_and_date(client):
    seed_course(client)
    open_session(client)

    response = client.get("/attendance/records", params={"studentId": "S1", "date": "2024-06-01"})
    assert response.status_code == 200
    assert [r["studentId"] for r in response.json()["data"]] == ["S1"]

    response = client.get("/attendance/records", params={"date": "2023-01-01"})
    assert response.status_code == 400


# === failures and limits ===

def test_failed_initialize_rolls_back_everything(client, settings, monkeypatch):
    seed_course(client)
    first = initialize(client)
    assert first.status_code == 201
    records_before = count_rows(settings, AttendanceRecord)

    real_generate_id = attendance_session.generate_id

    async def failing_generate_id(session, prefix):
        if prefix == attendance_session.RECORD_PREFIX:
            raise RuntimeError("sequence table unavailable")
        return await real_generate_id(session, prefix)

    monkeypatch.setattr(attendance_session, "generate_id", failing_generate_id)

    response = initialize(client)

    assert response.status_code == 500
    assert response.json()["message"] == "Error initializing attendance"
    assert response.json()["error"] == "INTERNAL_ERROR"
    assert count_rows(settings, AttendanceInstance) == 1
    assert count_rows(settings, AttendanceRecord) == records_before

    async def instance_counter(session):
        result = await session.execute(
            select(IdSequence.last_value).where(
                IdSequence.prefix == attendance_session.INSTANCE_PREFIX
            )
        )
        return result.scalar()

    assert run_with_session(settings, instance_counter) == 1


def test_whole_class_behind_one_address_can_scan(settings):
    class_size = 60
    limited = dataclasses.replace(settings, rate_limit_enabled=True)
    app = create_app(limited)
    app.state.attendance_service = AttendanceSessionService(
        AttendanceTokenService(SECRET), rng=StubRandom(0.99)
    )
    limiter.reset()
    try:
        with TestClient(app) as client:
            create_course(client, "CSC101")
            student_ids = [f"S{n:03d}" for n in range(class_size)]
            password_hash = hash_password("secret123")

            async def enrol(session):
                session.add_all(
                    Student(
                        student_id=student_id,
                        name=f"Student {student_id}",
                        email=f"{student_id.lower()}@uni.edu",
                        phone="08000000000",
                        password_hash=password_hash,
                        course_id="CSC101",
                    )
                    for student_id in student_ids
                )
                await session.commit()

            run_with_session(limited, enrol)

            data, token = open_session(client, class_type="online", lat=None, lon=None)
            codes = [
                client.get(f"/attendance/code/{data['qrCode']}").status_code
                for _ in range(class_size)
            ]
            scans = [scan(client, token, student_id).status_code for student_id in student_ids]
    finally:
        limiter.reset()

    assert codes == [200] * class_size
    assert scans == [200] * class_size
