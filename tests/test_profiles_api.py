class TestOwnProfile:

    def test_get(self, client, user_headers):
        response = client.get("/profile", headers=user_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["username"] == "user"
        assert body["phone"] is None
        assert body["phone_verified"] is False
        assert body["last_login"] is not None

    def test_requires_authentication(self, client):
        assert client.get("/profile").status_code == 401

    def test_update_contact_details(self, client, user_headers):
        response = client.put(
            "/profile",
            json={"phone": "+1 555 0100", "bio": "Frontend"},
            headers=user_headers,
        )

        assert response.status_code == 200
        assert response.json()["phone"] == "+1 555 0100"
        assert client.get("/profile", headers=user_headers).json()["bio"] == "Frontend"

    def test_cannot_change_role_or_verification(self, client, user_headers):
        response = client.put(
            "/profile",
            json={"role": "admin", "phone_verified": True, "full_name": "Boss"},
            headers=user_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["role"] == "user"
        assert body["phone_verified"] is False
        assert body["full_name"] == "Regular User"


class TestOtherProfiles:

    def test_manager_reads(self, client, manager_headers, seeded_users):
        response = client.get(
            f"/profile/{seeded_users['user']['id']}", headers=manager_headers
        )

        assert response.status_code == 200
        assert response.json()["email"] == "user@example.com"

    def test_user_cannot_read_others(self, client, user_headers, seeded_users):
        response = client.get(
            f"/profile/{seeded_users['manager']['id']}", headers=user_headers
        )

        assert response.status_code == 403
        assert response.json()["detail"]["required"] == "users:read"

    def test_only_admin_updates(self, client, admin_headers, manager_headers, seeded_users):
        path = f"/profile/{seeded_users['user']['id']}"
        payload = {"department": "Design", "phone_verified": True}

        assert client.put(path, json=payload, headers=manager_headers).status_code == 403

        response = client.put(path, json=payload, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["department"] == "Design"
        assert response.json()["phone_verified"] is True

    def test_unknown_user(self, client, admin_headers):
        response = client.get(
            "/profile/00000000-0000-0000-0000-000000000000", headers=admin_headers
        )

        assert response.status_code == 404
