from conftest import create_course, register_student


def test_register_hides_password(client):
    create_course(client, "CSC101")

    student = register_student(client, "S1", "CSC101")

    assert student["studentId"] == "S1"
    assert student["courseId"] == "CSC101"
    assert student["status"] == "active"
    assert "password" not in student
    assert "passwordHash" not in student


def test_duplicate_student_is_409(client):
    register_student(client, "S1")

    same_id = client.post(
        "/student/register",
        json={
            "studentId": "S1",
            "name": "Other",
            "email": "other@uni.edu",
            "phone": "1",
            "password": "secret123",
        },
    )
    same_email = client.post(
        "/student/register",
        json={
            "studentId": "S2",
            "name": "Other",
            "email": "s1@uni.edu",
            "phone": "1",
            "password": "secret123",
        },
    )

    assert same_id.status_code == 409
    assert same_email.status_code == 409
    assert same_email.json()["error"] == "DUPLICATE_ERROR"


def test_register_missing_fields_is_409(client):
    response = client.post("/student/register", json={"name": "Ada"})

    assert response.status_code == 409
    assert response.json()["error"] == "MISSING_FIELDS"
    assert "studentId" in response.json()["details"]["fields"]


def test_empty_student_list_is_409(client):
    response = client.get("/student")

    assert response.status_code == 409
    assert response.json()["message"] == "No students found"


def test_student_crud(client):
    register_student(client, "S1")

    assert client.get("/student").json()["data"][0]["studentId"] == "S1"

    updated = client.put("/student/S1", json={"name": "Ada Lovelace"})
    assert updated.status_code == 200
    assert updated.json()["data"]["name"] == "Ada Lovelace"

    detail = client.get("/student/S1")
    assert detail.json()["data"]["groups"] == []

    assert client.delete("/student/S1").status_code == 200
    assert client.get("/student/S1").status_code == 404


def test_course_defaults_and_detail(client):
    lecturer = client.post(
        "/lecturer", json={"name": "Dr Grace", "email": "grace@uni.edu"}
    ).json()["data"]
    assert lecturer["lecturerId"] == "LEC-000001"

    course = create_course(client, "CSC101", lecturerId=lecturer["lecturerId"])
    assert course["credits"] == 3
    assert course["semester"] == "Fall 2024"
    assert course["lecturerName"] == "Dr Grace"

    register_student(client, "S1", "CSC101")
    detail = client.get("/course/CSC101").json()["data"]
    assert detail["studentCount"] == 1
    assert detail["lecturerEmail"] == "grace@uni.edu"

    lecturer_detail = client.get(f"/lecturer/{lecturer['lecturerId']}").json()["data"]
    assert [c["courseId"] for c in lecturer_detail["courses"]] == ["CSC101"]


def test_duplicate_course_code_is_409(client):
    create_course(client, "CSC101")

    response = client.post(
        "/course", json={"courseId": "CSC102", "courseName": "Other", "courseCode": "CSC101"}
    )

    assert response.status_code == 409


def test_register_for_course(client):
    create_course(client, "CSC101")
    register_student(client, "S1")

    response = client.post("/course/register", json={"studentId": "S1", "courseId": "CSC101"})
    assert response.status_code == 200
    assert response.json()["data"]["courseId"] == "CSC101"

    again = client.post("/course/register", json={"studentId": "S1", "courseId": "CSC101"})
    assert again.status_code == 409

    courses = client.get("/course/student/S1").json()["data"]
    assert [c["courseId"] for c in courses] == ["CSC101"]


def test_deleting_course_detaches_students(client):
    create_course(client, "CSC101")
    register_student(client, "S1", "CSC101")

    assert client.delete("/course/CSC101").status_code == 200

    assert client.get("/student/S1").json()["data"]["courseId"] is None
    assert client.get("/course").status_code == 404


def test_deleting_lecturer_keeps_course(client):
    lecturer = client.post("/lecturer", json={"name": "Dr Grace", "email": "grace@uni.edu"}).json()["data"]
    create_course(client, "CSC101", lecturerId=lecturer["lecturerId"])

    assert client.delete(f"/lecturer/{lecturer['lecturerId']}").status_code == 200

    course = client.get("/course/CSC101").json()["data"]
    assert course["lecturerId"] is None


def test_unknown_field_is_400(client):
    response = client.post(
        "/student/register",
        json={
            "studentId": "S1",
            "name": "Ada",
            "email": "ada@uni.edu",
            "phone": "1",
            "password": "secret123",
            "isAdmin": True,
        },
    )

    assert response.status_code == 400
    assert response.json()["success"] is False
