from conftest import create_course, register_student


def start_conversation(client, participants, **extra):
    payload = {"title": "Project team", "participants": participants}
    payload.update(extra)
    response = client.post("/chat/conversations", json=payload)
    assert response.status_code == 201, response.json()
    return response.json()["data"]


def send(client, conversation_id, sender_id, content):
    return client.post(
        "/chat/messages",
        json={"conversationId": conversation_id, "senderId": sender_id, "content": content},
    )


def test_participants_are_deduplicated(client):
    conversation = start_conversation(client, ["S1", "S2", "S1", " "])

    assert conversation["conversationId"] == "CNV-000001"
    assert conversation["participants"] == ["S1", "S2"]
    assert conversation["type"] == "group"
    assert conversation["lastMessage"] is None


def test_messages_come_back_oldest_first(client):
    conversation_id = start_conversation(client, ["S1", "S2"])["conversationId"]
    for i, sender in enumerate(["S1", "S2", "S1"]):
        assert send(client, conversation_id, sender, f"message {i}").status_code == 201

    messages = client.get(f"/chat/messages/{conversation_id}").json()["data"]
    assert [m["content"] for m in messages] == ["message 0", "message 1", "message 2"]

    newest_two = client.get(f"/chat/messages/{conversation_id}", params={"limit": 2}).json()["data"]
    assert [m["content"] for m in newest_two] == ["message 1", "message 2"]

    older = client.get(
        f"/chat/messages/{conversation_id}", params={"limit": 2, "offset": 2}
    ).json()["data"]
    assert [m["content"] for m in older] == ["message 0"]


def test_non_participant_cannot_post(client):
    conversation_id = start_conversation(client, ["S1", "S2"])["conversationId"]

    response = send(client, conversation_id, "S9", "let me in")

    assert response.status_code == 403
    assert response.json()["error"] == "NOT_A_PARTICIPANT"


def test_conversation_list_carries_last_message(client):
    conversation_id = start_conversation(client, ["S1", "S2"])["conversationId"]
    send(client, conversation_id, "S2", "hello")
    send(client, conversation_id, "S1", "hi back")

    conversations = client.get("/chat/conversations/S2").json()["data"]

    assert len(conversations) == 1
    assert conversations[0]["lastMessage"]["content"] == "hi back"
    assert client.get("/chat/conversations/S9").status_code == 404


def test_messages_for_unknown_conversation_is_404(client):
    assert client.get("/chat/messages/CNV-999999").status_code == 404


def test_course_chat_is_created_once(client):
    lecturer_id = client.post(
        "/lecturer", json={"name": "Dr Grace", "email": "grace@uni.edu"}
    ).json()["data"]["lecturerId"]
    create_course(client, "CSC101", lecturerId=lecturer_id, courseName="Algorithms")
    register_student(client, "S2", "CSC101")
    register_student(client, "S1", "CSC101")

    first = client.get("/chat/course-chat/CSC101").json()["data"]
    second = client.get("/chat/course-chat/CSC101").json()["data"]

    assert first["conversationId"] == second["conversationId"]
    assert first["title"] == "Algorithms Chat"
    assert first["type"] == "course"
    assert first["participants"] == [lecturer_id, "S1", "S2"]


def test_course_chat_for_unknown_course_is_404(client):
    assert client.get("/chat/course-chat/NOPE").status_code == 404
