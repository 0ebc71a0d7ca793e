from conftest import create_course, register_student

FUTURE_DUE = "2030-01-09T23:59:00Z"


def create_assignment(client, course_id="CSC101", **extra):
    payload = {"title": "Essay", "courseId": course_id, "dueDate": FUTURE_DUE}
    payload.update(extra)
    response = client.post("/assignment", json=payload)
    assert response.status_code == 201, response.json()
    return response.json()["data"]


def create_event(client, **extra):
    payload = {
        "title": "Mid-term review",
        "description": "Revision session",
        "startDate": "2030-01-08T10:00:00Z",
        "endDate": "2030-01-08T12:00:00Z",
        "location": "Hall B",
    }
    payload.update(extra)
    response = client.post("/event", json=payload)
    assert response.status_code == 201, response.json()
    return response.json()["data"]


def test_group_membership(client):
    create_course(client, "CSC101")
    register_student(client, "S1", "CSC101")

    group = client.post("/group", json={"name": "Team A", "courseId": "CSC101"}).json()["data"]
    assert group["groupId"] == "GRP-000001"
    assert group["members"] == []

    added = client.post(f"/group/{group['groupId']}/members", json={"studentId": "S1", "isLeader": True})
    assert added.status_code == 201
    members = added.json()["data"]["members"]
    assert [(m["studentId"], m["isLeader"]) for m in members] == [("S1", True)]

    again = client.post(f"/group/{group['groupId']}/members", json={"studentId": "S1"})
    assert again.status_code == 409

    student = client.get("/student/S1").json()["data"]
    assert student["groups"][0]["name"] == "Team A"

    listed = client.get("/group", params={"courseId": "CSC101"}).json()["data"]
    assert listed[0]["memberCount"] == 1

    removed = client.delete(f"/group/{group['groupId']}/members/S1")
    assert removed.status_code == 200
    assert client.delete(f"/group/{group['groupId']}/members/S1").status_code == 404


def test_assignment_submission_and_grading(client):
    create_course(client, "CSC101")
    register_student(client, "S1", "CSC101")
    register_student(client, "S2", "CSC101")
    assignment = create_assignment(client, points=50)
    assert assignment["assignmentId"] == "ASG-000001"
    assert assignment["points"] == 50

    first = client.post(
        f"/assignment/{assignment['assignmentId']}/submissions",
        json={"studentId": "S1", "content": "My essay"},
    )
    assert first.status_code == 201
    submission_id = first.json()["data"]["submissionId"]

    duplicate = client.post(
        f"/assignment/{assignment['assignmentId']}/submissions", json={"studentId": "S1"}
    )
    assert duplicate.status_code == 409

    client.post(f"/assignment/{assignment['assignmentId']}/submissions", json={"studentId": "S2"})

    graded = client.patch(f"/assignment/submissions/{submission_id}", json={"grade": 42.5})
    assert graded.status_code == 200
    assert graded.json()["data"]["grade"] == 42.5

    detail = client.get(f"/assignment/{assignment['assignmentId']}").json()["data"]
    assert detail["submissionCount"] == 2

    report = client.get("/report/assignments", params={"courseId": "CSC101"}).json()["data"]
    assert report[0]["totalSubmissions"] == 2
    assert report[0]["averageGrade"] == 42.5


def test_assignment_for_unknown_course_is_404(client):
    response = client.post(
        "/assignment", json={"title": "Essay", "courseId": "NOPE", "dueDate": FUTURE_DUE}
    )

    assert response.status_code == 404


def test_event_end_before_start_is_rejected(client):
    response = client.post(
        "/event",
        json={
            "title": "Backwards",
            "description": "x",
            "startDate": "2030-01-08T12:00:00Z",
            "endDate": "2030-01-08T10:00:00Z",
            "location": "Hall B",
        },
    )

    assert response.status_code == 400


def test_calendar_views(client):
    create_course(client, "CSC101")
    create_course(client, "MTH201")
    register_student(client, "S1", "CSC101")
    course_event = create_event(client, courseId="CSC101")
    general_event = create_event(client, title="Orientation", startDate="2030-01-07T09:00:00Z", endDate="2030-01-07T10:00:00Z")
    create_event(client, title="Other class", courseId="MTH201")
    create_assignment(client)

    month = client.get(
        "/calendar/events", params={"year": 2030, "month": 1, "courseId": "CSC101"}
    ).json()["data"]
    assert [e["eventId"] for e in month] == [general_event["eventId"], course_event["eventId"]]

    assert client.get("/calendar/events", params={"year": 2030, "month": 2}).json()["data"] == []

    upcoming = client.get("/calendar/upcoming", params={"limit": 2}).json()["data"]
    assert len(upcoming) == 2
    assert upcoming[0]["eventId"] == general_event["eventId"]

    deadlines = client.get("/calendar/deadlines", params={"studentId": "S1"}).json()["data"]
    assert [d["status"] for d in deadlines] == ["pending"]

    schedule = client.get("/calendar/schedule/S1", params={"weekStart": "2030-01-09"}).json()["data"]
    assert schedule["weekStart"] == "2030-01-07"
    assert schedule["weekEnd"] == "2030-01-13"
    assert len(schedule["events"]) == 2
    assert schedule["deadlines"][0]["title"] == "Essay"


def test_schedule_for_unknown_student_is_404(client):
    assert client.get("/calendar/schedule/NOPE").status_code == 404


def test_notifications_include_general_notices(client):
    create_course(client, "CSC101")
    create_course(client, "MTH201")
    client.post("/notification", json={"title": "Lab moved", "message": "Room 4", "courseId": "CSC101"})
    client.post("/notification", json={"title": "Holiday", "message": "No classes"})
    client.post("/notification", json={"title": "Quiz", "message": "Friday", "courseId": "MTH201"})

    titles = {
        n["title"]
        for n in client.get("/notification", params={"courseId": "CSC101"}).json()["data"]
    }

    assert titles == {"Lab moved", "Holiday"}


def test_anonymous_feedback_hides_author(client):
    register_student(client, "S1")

    client.post("/feedback", json={"studentId": "S1", "content": "Great class", "isAnonymous": True})
    client.post("/feedback", json={"studentId": "S1", "content": "Need more examples"})

    items = {f["content"]: f for f in client.get("/feedback").json()["data"]}

    assert items["Great class"]["studentId"] is None
    assert items["Great class"]["studentName"] is None
    assert items["Need more examples"]["studentName"] == "Student S1"


def test_named_feedback_requires_student(client):
    response = client.post("/feedback", json={"content": "Who am I"})

    assert response.status_code == 400


def test_dashboard_counts(client):
    create_course(client, "CSC101")
    register_student(client, "S1", "CSC101")
    create_assignment(client)
    create_event(client)
    client.post(
        "/attendance/initialize",
        json={"courseId": "CSC101", "date": "2030-01-08", "classType": "online"},
    )

    dashboard = client.get("/report/dashboard").json()["data"]

    assert dashboard["totalStudents"] == 1
    assert dashboard["totalCourses"] == 1
    assert dashboard["totalAssignments"] == 1
    assert dashboard["totalEvents"] == 1
    assert dashboard["openAttendanceSessions"] == 1
    assert {a["type"] for a in dashboard["recentActivities"]} == {"assignment", "event"}


def test_attendance_report_percentages(client):
    create_course(client, "CSC101")
    register_student(client, "S1", "CSC101")
    register_student(client, "S2", "CSC101")
    instance_id = client.post(
        "/attendance/initialize",
        json={"courseId": "CSC101", "date": "2030-01-08", "classType": "online"},
    ).json()["data"]["attendanceInstanceId"]
    record_id = client.get(
        "/attendance/records", params={"instanceId": instance_id, "studentId": "S1"}
    ).json()["data"][0]["recordId"]
    client.post("/attendance/mark", json={"recordId": record_id, "studentId": "S1"})

    rows = {
        r["studentId"]: r
        for r in client.get("/report/attendance", params={"courseId": "CSC101"}).json()["data"]
    }

    assert rows["S1"]["attendancePercentage"] == 100.0
    assert rows["S2"]["presentSessions"] == 0
    assert rows["S2"]["totalSessions"] == 1

    courses = client.get("/report/courses").json()["data"]
    assert courses[0]["avgAttendance"] == 50.0
    assert courses[0]["totalStudents"] == 2
