from taskflow.core.permissions import permission_matrix


def register(client, **overrides):
    payload = {
        "username": "newbie",
        "email": "newbie@example.com",
        "password": "secret123",
        "again_password": "secret123",
        "full_name": "New Person",
    }
    payload.update(overrides)
    return client.post("/auth/register", json=payload)


class TestRegistration:

    def test_register_assigns_base_role(self, client):
        response = register(client)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True

        me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
        assert me.json()["role"] == "user"
        assert me.json()["department"] == "General"

    def test_role_field_is_ignored(self, client):
        response = register(client, role="admin")
        token = response.json()["token"]

        me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.json()["role"] == "user"

    def test_password_mismatch(self, client):
        body = register(client, again_password="other").json()

        assert body["success"] is False
        assert body["error"] == "Passwords do not match"

    def test_duplicate_email(self, client):
        body = register(client, email="admin@example.com").json()

        assert body["success"] is False


class TestLogin:

    def test_invalid_password(self, client):
        body = client.post(
            "/auth/login", json={"email": "admin@example.com", "password": "wrong"}
        ).json()

        assert body == {
            "success": False,
            "message": None,
            "error": "Invalid credentials",
            "token": None,
        }

    def test_unknown_email(self, client):
        body = client.post(
            "/auth/login", json={"email": "ghost@example.com", "password": "whatever"}
        ).json()

        assert body["success"] is False

    def test_me(self, client, manager_headers):
        body = client.get("/auth/me", headers=manager_headers).json()

        assert body["username"] == "manager"
        assert body["role"] == "manager"

    def test_refresh(self, client, user_headers):
        body = client.post("/auth/refresh", headers=user_headers).json()

        assert body["success"] is True
        assert body["token"]

    def test_logout_revokes_token(self, client, user_headers, token_blacklist):
        body = client.post("/auth/logout", headers=user_headers).json()

        assert body["success"] is True
        token_blacklist.assert_awaited_once()
        _, ttl = token_blacklist.await_args.args
        assert ttl > 0


class TestPermissionsEndpoint:

    def test_user_payload(self, client, user_headers):
        body = client.get("/auth/permissions", headers=user_headers).json()

        assert body["role"] == "user"
        assert body["display_name"] == "Team Member"
        assert body["permissions"]["comments"] == ["create", "read", "update_own", "delete_own"]
        assert body["matrix"] == permission_matrix()

    def test_admin_payload(self, client, admin_headers):
        body = client.get("/auth/permissions", headers=admin_headers).json()

        assert body["badge_color"] == "#e74c3c"
        assert "change_role" in body["permissions"]["users"]

    def test_requires_authentication(self, client):
        assert client.get("/auth/permissions").status_code == 401
