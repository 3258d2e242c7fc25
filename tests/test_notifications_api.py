import pytest


@pytest.fixture
def user_inbox(client, manager_headers, seeded_users):
    """Three notifications for the regular user, created low, urgent, normal."""
    user_id = seeded_users["user"]["id"]
    for title, priority in (("Tidy backlog", "low"), ("Fix checkout", "urgent")):
        response = client.post(
            "/tasks",
            json={"project_id": 1, "title": title, "priority": priority, "assignee_id": user_id},
            headers=manager_headers,
        )
        assert response.status_code == 201

    response = client.post(
        "/tasks/1/comments", json={"content": "Please add a hero image"}, headers=manager_headers
    )
    assert response.status_code == 201


def inbox(client, headers, **params):
    response = client.get("/notifications", params=params, headers=headers)
    assert response.status_code == 200
    return response.json()


def test_requires_authentication(client):
    assert client.get("/notifications").status_code == 401


def test_most_urgent_first(client, user_headers, user_inbox):
    body = inbox(client, user_headers)

    assert [(n["type"], n["priority"]) for n in body] == [
        ("task_assigned", "urgent"),
        ("comment_added", "normal"),
        ("task_assigned", "low"),
    ]
    assert body[0]["title"] == 'You were assigned to "Fix checkout"'


def test_filters(client, user_headers, user_inbox):
    comments = inbox(client, user_headers, type="comment_added")
    assert [n["message"] for n in comments] == ["Please add a hero image"]

    assert len(inbox(client, user_headers, priority="low")) == 1
    assert len(inbox(client, user_headers, is_read="true")) == 0


def test_scoped_to_recipient(client, manager_headers, user_headers, user_inbox):
    assert inbox(client, manager_headers) == []

    notification_id = inbox(client, user_headers)[0]["id"]
    response = client.put(f"/notifications/{notification_id}/read", headers=manager_headers)

    assert response.status_code == 404


def test_no_notification_for_own_actions(client, manager_headers):
    # Task 2 is assigned to the manager
    client.post("/tasks/2/comments", json={"content": "Note to self"}, headers=manager_headers)

    assert inbox(client, manager_headers) == []


def test_status_change_notifies_creator(client, manager_headers, user_headers):
    client.patch("/tasks/1/status", json={"status": "review"}, headers=user_headers)

    body = inbox(client, manager_headers)
    assert [n["type"] for n in body] == ["status_changed"]
    assert body[0]["task_id"] == 1


def test_member_added_is_notified(client, manager_headers, admin_headers, seeded_users):
    client.post(
        "/projects/1/members",
        json={"user_id": seeded_users["admin"]["id"]},
        headers=manager_headers,
    )

    body = inbox(client, admin_headers)
    assert [(n["type"], n["project_id"]) for n in body] == [("project_added", 1)]


class TestReadState:

    def test_mark_one_read(self, client, user_headers, user_inbox):
        first = inbox(client, user_headers)[0]

        response = client.put(f"/notifications/{first['id']}/read", headers=user_headers)

        assert response.status_code == 200
        assert response.json()["is_read"] is True
        count = client.get("/notifications/unread/count", headers=user_headers).json()
        assert count == {"unread_count": 2}

    def test_mark_all_read(self, client, user_headers, user_inbox):
        response = client.put("/notifications/read/all", headers=user_headers)

        assert response.status_code == 200
        assert client.get(
            "/notifications/unread/count", headers=user_headers
        ).json()["unread_count"] == 0
        assert len(inbox(client, user_headers, is_read="true")) == 3

    def test_unknown_notification(self, client, user_headers):
        assert client.put("/notifications/999/read", headers=user_headers).status_code == 404


class TestArchive:

    def test_archive_and_restore(self, client, user_headers, user_inbox):
        target = inbox(client, user_headers)[1]

        archived = client.put(f"/notifications/{target['id']}/archive", headers=user_headers)
        assert archived.json()["is_archived"] is True
        assert target["id"] not in [n["id"] for n in inbox(client, user_headers)]
        assert [n["id"] for n in client.get(
            "/notifications/archived", headers=user_headers
        ).json()] == [target["id"]]

        restored = client.put(f"/notifications/{target['id']}/restore", headers=user_headers)
        assert restored.json()["is_archived"] is False
        assert len(inbox(client, user_headers)) == 3

    def test_archived_are_not_counted(self, client, user_headers, user_inbox):
        target = inbox(client, user_headers)[0]
        client.put(f"/notifications/{target['id']}/archive", headers=user_headers)

        assert client.get(
            "/notifications/unread/count", headers=user_headers
        ).json()["unread_count"] == 2

    def test_clear_all(self, client, user_headers, user_inbox):
        response = client.put("/notifications/clear/all", headers=user_headers)

        assert response.status_code == 200
        assert inbox(client, user_headers) == []
        assert len(client.get("/notifications/archived", headers=user_headers).json()) == 3
