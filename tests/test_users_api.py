NEW_USER = {
    "username": "designer",
    "email": "designer@example.com",
    "password": "design123",
    "full_name": "Dana Designer",
    "role": "manager",
}


class TestUserAccess:

    def test_user_role_has_no_user_access(self, client, user_headers, seeded_users):
        assert client.get("/users", headers=user_headers).status_code == 403
        assert client.get(
            f"/users/{seeded_users['admin']['id']}", headers=user_headers
        ).status_code == 403

    def test_manager_reads_but_cannot_write(self, client, manager_headers, seeded_users):
        assert client.get("/users", headers=manager_headers).status_code == 200

        user_id = seeded_users["user"]["id"]
        assert client.post("/users", json=NEW_USER, headers=manager_headers).status_code == 403
        assert client.put(
            f"/users/{user_id}", json={"full_name": "X"}, headers=manager_headers
        ).status_code == 403
        assert client.delete(f"/users/{user_id}", headers=manager_headers).status_code == 403

    def test_admin_creates_user_with_role(self, client, admin_headers):
        response = client.post("/users", json=NEW_USER, headers=admin_headers)

        assert response.status_code == 201
        assert response.json()["role"] == "manager"

        conflict = client.post("/users", json=NEW_USER, headers=admin_headers)
        assert conflict.status_code == 409

    def test_admin_updates_profile(self, client, admin_headers, seeded_users):
        user_id = seeded_users["user"]["id"]

        response = client.put(
            f"/users/{user_id}", json={"department": "Design"}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["department"] == "Design"
        assert response.json()["role"] == "user"

    def test_email_conflict(self, client, admin_headers, seeded_users):
        response = client.put(
            f"/users/{seeded_users['user']['id']}",
            json={"email": "manager@example.com"},
            headers=admin_headers,
        )

        assert response.status_code == 409


class TestRoleChanges:

    def test_only_admin_changes_roles(self, client, manager_headers, seeded_users):
        response = client.put(
            f"/users/{seeded_users['user']['id']}/role",
            json={"role": "manager"},
            headers=manager_headers,
        )

        assert response.status_code == 403
        assert response.json()["detail"]["required"] == "users:change_role"

    def test_new_role_applies_to_existing_token(
        self, client, admin_headers, user_headers, seeded_users
    ):
        assert client.post(
            "/projects", json={"name": "Before"}, headers=user_headers
        ).status_code == 403

        response = client.put(
            f"/users/{seeded_users['user']['id']}/role",
            json={"role": "manager"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["role"] == "manager"

        assert client.post(
            "/projects", json={"name": "After"}, headers=user_headers
        ).status_code == 201

    def test_admin_cannot_demote_self(self, client, admin_headers, seeded_users):
        response = client.put(
            f"/users/{seeded_users['admin']['id']}/role",
            json={"role": "user"},
            headers=admin_headers,
        )

        assert response.status_code == 400

    def test_unknown_role_rejected(self, client, admin_headers, seeded_users):
        response = client.put(
            f"/users/{seeded_users['user']['id']}/role",
            json={"role": "superuser"},
            headers=admin_headers,
        )

        assert response.status_code == 422


class TestDeactivation:

    def test_deactivated_user_loses_access(self, client, admin_headers, user_headers, seeded_users):
        response = client.delete(f"/users/{seeded_users['user']['id']}", headers=admin_headers)
        assert response.status_code == 200

        assert client.get("/projects", headers=user_headers).status_code == 401

    def test_cannot_delete_self(self, client, admin_headers, seeded_users):
        response = client.delete(f"/users/{seeded_users['admin']['id']}", headers=admin_headers)

        assert response.status_code == 400
