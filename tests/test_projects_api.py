class TestProjectCrud:

    def test_everyone_can_read(self, client, admin_headers, manager_headers, user_headers):
        for headers in (admin_headers, manager_headers, user_headers):
            response = client.get("/projects", headers=headers)
            assert response.status_code == 200
            assert response.json()["total"] == 1

    def test_manager_creates_and_becomes_member(self, client, manager_headers, seeded_users):
        response = client.post(
            "/projects",
            json={"name": "Mobile App", "status": "active"},
            headers=manager_headers,
        )

        assert response.status_code == 201
        body = response.json()
        manager_id = seeded_users["manager"]["id"]
        assert body["owner_id"] == manager_id
        assert body["member_ids"] == [manager_id]
        assert body["status"] == "active"

    def test_user_cannot_create(self, client, user_headers):
        response = client.post("/projects", json={"name": "Side project"}, headers=user_headers)

        assert response.status_code == 403

    def test_invalid_dates(self, client, admin_headers):
        response = client.post(
            "/projects",
            json={"name": "Backwards", "start_date": "2025-05-01", "end_date": "2025-01-01"},
            headers=admin_headers,
        )

        assert response.status_code == 400

    def test_update(self, client, manager_headers, user_headers):
        assert client.put(
            "/projects/1", json={"status": "on_hold"}, headers=user_headers
        ).status_code == 403

        response = client.put("/projects/1", json={"status": "on_hold"}, headers=manager_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "on_hold"
        assert response.json()["name"] == "Website Redesign"

    def test_only_admin_deletes(self, client, admin_headers, manager_headers):
        assert client.delete("/projects/1", headers=manager_headers).status_code == 403

        response = client.delete("/projects/1", headers=admin_headers)
        assert response.status_code == 200
        assert client.get("/projects/1", headers=admin_headers).status_code == 404
        assert client.get("/tasks", headers=admin_headers).json()["total"] == 0

    def test_missing_project(self, client, admin_headers):
        assert client.get("/projects/42", headers=admin_headers).status_code == 404

    def test_project_tasks(self, client, user_headers):
        response = client.get("/projects/1/tasks", headers=user_headers)

        assert response.status_code == 200
        assert response.json()["total"] == 2


class TestMembers:

    def test_manager_manages_members(self, client, manager_headers, seeded_users):
        admin_id = seeded_users["admin"]["id"]

        response = client.post(
            "/projects/1/members", json={"user_id": admin_id}, headers=manager_headers
        )
        assert response.status_code == 201
        assert admin_id in response.json()["member_ids"]

        duplicate = client.post(
            "/projects/1/members", json={"user_id": admin_id}, headers=manager_headers
        )
        assert duplicate.status_code == 409

        response = client.delete(f"/projects/1/members/{admin_id}", headers=manager_headers)
        assert response.status_code == 200
        assert admin_id not in response.json()["member_ids"]

    def test_user_cannot_manage_members(self, client, user_headers, seeded_users):
        response = client.post(
            "/projects/1/members",
            json={"user_id": seeded_users["admin"]["id"]},
            headers=user_headers,
        )

        assert response.status_code == 403
        assert response.json()["detail"]["required"] == "projects:manage_members"

    def test_owner_cannot_be_removed(self, client, admin_headers, seeded_users):
        manager_id = seeded_users["manager"]["id"]

        response = client.delete(f"/projects/1/members/{manager_id}", headers=admin_headers)

        assert response.status_code == 400
