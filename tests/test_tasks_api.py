class TestTaskCrud:

    def test_list_and_filter(self, client, user_headers, seeded_users):
        assert client.get("/tasks", headers=user_headers).json()["total"] == 2

        by_status = client.get("/tasks", params={"status": "todo"}, headers=user_headers).json()
        assert [task["title"] for task in by_status["items"]] == ["Review brand guidelines"]

        mine = client.get(
            "/tasks",
            params={"assignee_id": seeded_users["user"]["id"]},
            headers=user_headers,
        ).json()
        assert mine["total"] == 1

    def test_manager_creates_task_with_assignee(self, client, manager_headers, seeded_users):
        response = client.post(
            "/tasks",
            json={
                "project_id": 1,
                "title": "Write copy",
                "priority": "urgent",
                "assignee_id": seeded_users["user"]["id"],
            },
            headers=manager_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "todo"
        assert body["priority"] == "urgent"
        assert body["created_by"] == seeded_users["manager"]["id"]

    def test_unknown_project(self, client, manager_headers):
        response = client.post(
            "/tasks", json={"project_id": 99, "title": "Orphan"}, headers=manager_headers
        )

        assert response.status_code == 404

    def test_user_cannot_create_or_edit(self, client, user_headers):
        assert client.post(
            "/tasks", json={"project_id": 1, "title": "Mine"}, headers=user_headers
        ).status_code == 403
        assert client.put(
            "/tasks/1", json={"title": "Renamed"}, headers=user_headers
        ).status_code == 403

    def test_manager_updates(self, client, manager_headers):
        response = client.put(
            "/tasks/2", json={"title": "Review guidelines", "priority": "low"},
            headers=manager_headers,
        )

        assert response.status_code == 200
        assert response.json()["title"] == "Review guidelines"
        assert response.json()["priority"] == "low"

    def test_only_admin_deletes(self, client, admin_headers, manager_headers):
        assert client.delete("/tasks/2", headers=manager_headers).status_code == 403
        assert client.delete("/tasks/2", headers=admin_headers).status_code == 200
        assert client.get("/tasks/2", headers=admin_headers).status_code == 404


class TestAssignment:

    def test_manager_assigns(self, client, manager_headers, seeded_users):
        admin_id = seeded_users["admin"]["id"]

        response = client.put(
            "/tasks/1/assign", json={"assignee_id": admin_id}, headers=manager_headers
        )

        assert response.status_code == 200
        assert response.json()["assignee_id"] == admin_id

    def test_unassign(self, client, admin_headers):
        response = client.put("/tasks/1/assign", json={"assignee_id": None}, headers=admin_headers)

        assert response.json()["assignee_id"] is None

    def test_user_cannot_assign(self, client, user_headers, seeded_users):
        response = client.put(
            "/tasks/1/assign",
            json={"assignee_id": seeded_users["user"]["id"]},
            headers=user_headers,
        )

        assert response.status_code == 403
        assert response.json()["detail"]["required"] == "tasks:assign"

    def test_unknown_assignee(self, client, manager_headers):
        response = client.put(
            "/tasks/1/assign",
            json={"assignee_id": "00000000-0000-0000-0000-000000000000"},
            headers=manager_headers,
        )

        assert response.status_code == 404


class TestStatusUpdates:

    def test_assignee_updates_status(self, client, user_headers):
        response = client.patch("/tasks/1/status", json={"status": "review"}, headers=user_headers)

        assert response.status_code == 200
        assert response.json()["status"] == "review"

    def test_user_cannot_touch_others_tasks(self, client, user_headers):
        response = client.patch("/tasks/2/status", json={"status": "done"}, headers=user_headers)

        assert response.status_code == 403

    def test_manager_updates_any_status(self, client, manager_headers):
        response = client.patch("/tasks/1/status", json={"status": "done"}, headers=manager_headers)

        assert response.status_code == 200

    def test_invalid_status(self, client, manager_headers):
        response = client.patch(
            "/tasks/1/status", json={"status": "archived"}, headers=manager_headers
        )

        assert response.status_code == 422
