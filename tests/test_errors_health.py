def test_health_reports_database(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["database"] == "ok"
    assert body["data"]["environment"] == "test"


def test_errors_share_the_envelope(client):
    response = client.get("/course/NOPE")

    assert response.status_code == 404
    assert response.json() == {
        "success": False,
        "message": "Course not found",
        "error": "NOT_FOUND",
        "details": {"courseId": "NOPE"},
    }


def test_unknown_route_uses_the_envelope(client):
    response = client.get("/nowhere")

    assert response.status_code == 404
    assert response.json()["success"] is False
    assert response.json()["error"] == "HTTP_ERROR"


def test_request_id_header_is_set(client):
    assert client.get("/course").headers.get("X-Request-ID")
    assert "X-Request-ID" not in client.get("/health").headers
