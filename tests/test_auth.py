from conftest import register_student


def login(client, student_id="S1", password="secret123"):
    return client.post("/auth/login", json={"studentId": student_id, "password": password})


def test_login_and_me(client):
    register_student(client, "S1")

    response = login(client)
    assert response.status_code == 200
    token = response.json()["data"]
    assert token["tokenType"] == "bearer"
    assert token["expiresIn"] == 3600

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token['accessToken']}"})
    assert me.status_code == 200
    assert me.json()["data"]["studentId"] == "S1"
    assert me.json()["data"]["role"] == "student"


def test_wrong_password_and_unknown_student_look_the_same(client):
    register_student(client, "S1")

    wrong_password = login(client, password="nope")
    unknown = login(client, student_id="S9")

    assert wrong_password.status_code == 401
    assert unknown.status_code == 401
    assert wrong_password.json()["message"] == unknown.json()["message"]


def test_inactive_student_cannot_log_in(client):
    register_student(client, "S1")
    client.put("/student/S1", json={"status": "inactive"})

    response = login(client)

    assert response.status_code == 401
    assert response.json()["message"] == "Student account is inactive"


def test_me_requires_credentials(client):
    assert client.get("/auth/me").status_code == 401

    garbage = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert garbage.status_code == 401
    assert garbage.json()["message"] == "Invalid token"
