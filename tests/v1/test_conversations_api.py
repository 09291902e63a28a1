# mypy: ignore-errors
"""Tests for conversation and message endpoints."""

import re
import uuid

from fastapi import status

DISPLAY_TIME = re.compile(r"^\d{1,2} [A-Z][a-z]+ \d{4}, \d{1,2}:\d{2} (AM|PM)$")


def _start(client, other_user) -> dict:
    response = client.post("/api/v1/conversations/", json={"member_ids": [other_user.user_id]})
    assert response.status_code in {status.HTTP_200_OK, status.HTTP_201_CREATED}
    return response.json()


def test_create_direct_conversation_and_reuse_it(client, sign_in, test_user, other_user) -> None:
    sign_in(client, test_user)

    created = client.post("/api/v1/conversations/", json={"member_ids": [other_user.user_id]})
    again = client.post("/api/v1/conversations/", json={"member_ids": [other_user.user_id]})

    assert created.status_code == status.HTTP_201_CREATED
    assert again.status_code == status.HTTP_200_OK
    assert again.json()["conversation_id"] == created.json()["conversation_id"]
    body = created.json()
    assert body["name"] == "bob"
    assert body["is_group"] is False
    assert DISPLAY_TIME.match(body["created_at"])


def test_group_needs_a_name(client, sign_in, test_user, other_user) -> None:
    sign_in(client, test_user)
    response = client.post(
        "/api/v1/conversations/",
        json={"member_ids": [other_user.user_id], "is_group": True},
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["error"]["name"] == "ValidationError"


def test_create_group(client, sign_in, test_user, other_user) -> None:
    sign_in(client, test_user)
    response = client.post(
        "/api/v1/conversations/",
        json={"member_ids": [other_user.user_id], "is_group": True, "name": "Friends"},
    )
    body = response.json()
    assert response.status_code == status.HTTP_201_CREATED
    assert body["name"] == "Friends"
    assert body["admin_ids"] == [test_user.user_id]


def test_send_list_and_read_messages(client, sign_in, test_user, other_user) -> None:
    sign_in(client, test_user)
    conversation = _start(client, other_user)
    cid = conversation["conversation_id"]

    sent = client.post(f"/api/v1/conversations/{cid}/messages", json={"content": "hi bob"})
    assert sent.status_code == status.HTTP_201_CREATED
    message = sent.json()
    assert message["content"] == "hi bob"
    assert message["deliver_count"] == 1
    assert message["seen_count"] == 0
    assert DISPLAY_TIME.match(message["sent_at"])

    page = client.get(f"/api/v1/conversations/{cid}/messages").json()
    assert page["has_next_page"] is False
    assert [m["content"] for m in page["items"]] == ["hi bob"]

    listed = client.get("/api/v1/conversations/").json()
    assert [c["conversation_id"] for c in listed] == [cid]
    assert listed[0]["unseen_messages_count"] == 0


def test_recipient_marks_message_seen(client, sign_in, test_user, other_user) -> None:
    sign_in(client, test_user)
    cid = _start(client, other_user)["conversation_id"]
    message_id = client.post(f"/api/v1/conversations/{cid}/messages", json={"content": "ping"}).json()["message_id"]

    sign_in(client, other_user)
    assert client.get("/api/v1/conversations/").json()[0]["unseen_messages_count"] == 1
    seen = client.put(f"/api/v1/messages/{message_id}/seen")
    assert seen.status_code == status.HTTP_200_OK
    assert seen.json()["seen_at"] is not None
    assert client.get("/api/v1/conversations/").json()[0]["unseen_messages_count"] == 0


def test_delete_message_keeps_a_placeholder(client, sign_in, test_user, other_user) -> None:
    sign_in(client, test_user)
    cid = _start(client, other_user)["conversation_id"]
    message_id = client.post(f"/api/v1/conversations/{cid}/messages", json={"content": "oops"}).json()["message_id"]

    response = client.delete(f"/api/v1/messages/{message_id}")
    assert response.status_code == status.HTTP_204_NO_CONTENT

    items = client.get(f"/api/v1/conversations/{cid}/messages").json()["items"]
    assert items[0]["message_id"] == message_id
    assert items[0]["content"] is None
    assert items[0]["deleted_at"] is not None


def test_empty_message_is_rejected(client, sign_in, test_user, other_user) -> None:
    sign_in(client, test_user)
    cid = _start(client, other_user)["conversation_id"]
    response = client.post(f"/api/v1/conversations/{cid}/messages", json={})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_outsiders_cannot_read_messages(client, sign_in, test_user, other_user, make_user) -> None:
    sign_in(client, test_user)
    cid = _start(client, other_user)["conversation_id"]

    sign_in(client, make_user(username="eve", is_verified=True))
    response = client.get(f"/api/v1/conversations/{cid}/messages")
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_delete_conversation(client, sign_in, test_user, other_user) -> None:
    sign_in(client, test_user)
    cid = _start(client, other_user)["conversation_id"]

    assert client.delete(f"/api/v1/conversations/{cid}").status_code == status.HTTP_204_NO_CONTENT
    assert client.get(f"/api/v1/conversations/{cid}/messages").status_code == status.HTTP_404_NOT_FOUND
    missing = client.delete(f"/api/v1/conversations/{uuid.uuid4()}")
    assert missing.status_code == status.HTTP_404_NOT_FOUND
