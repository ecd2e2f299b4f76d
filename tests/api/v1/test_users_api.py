"""
End-to-end tests for the /api/v1/users endpoints over in-memory backends.
"""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

BASE = "/api/v1/users"
HEADER = "X-Session-Id"


def register(client: TestClient, email: str = "ada@example.com", **overrides) -> dict:
    payload = {
        "email": email,
        "password": "secret1",
        "first_name": "Ada",
        "last_name": "Lovelace",
    }
    payload.update(overrides)
    response = client.post(f"{BASE}/register", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def login(client: TestClient, email: str = "ada@example.com", password: str = "secret1") -> str:
    response = client.post(f"{BASE}/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["session_id"]


class TestRegisterEndpoint:
    """Tests for POST /register."""

    def test_register(self, client: TestClient) -> None:
        """Test registration returns the created user without a password."""
        data = register(client, email="Ada@Example.com")

        assert data["email"] == "ada@example.com"
        assert data["role"] == "user"
        assert data["user_id"]
        assert "password" not in data

    def test_duplicate_email(self, client: TestClient) -> None:
        """Test duplicate registration returns 409."""
        register(client)

        response = client.post(
            f"{BASE}/register",
            json={
                "email": "ADA@example.com",
                "password": "secret1",
                "first_name": "Other",
                "last_name": "Person",
            },
        )

        assert response.status_code == 409
        assert response.json()["code"] == "conflict"

    def test_invalid_payload(self, client: TestClient) -> None:
        """Test malformed registration is rejected by validation."""
        response = client.post(
            f"{BASE}/register",
            json={"email": "not-an-email", "password": "x", "first_name": "", "last_name": ""},
        )
        assert response.status_code == 422


class TestSessionEndpoints:
    """Tests for login, /me and logout."""

    def test_login_and_me(self, client: TestClient) -> None:
        """Test a session token resolves to its user."""
        created = register(client)
        response = client.post(
            f"{BASE}/login", json={"email": "ada@example.com", "password": "secret1"}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["user"]["user_id"] == created["user_id"]
        assert "password" not in body["user"]

        me = client.get(f"{BASE}/me", headers={HEADER: body["session_id"]})

        assert me.status_code == 200
        assert me.json()["user_id"] == created["user_id"]

    @pytest.mark.parametrize(
        "email,password",
        [("ada@example.com", "wrong-password"), ("nobody@example.com", "secret1")],
    )
    def test_login_failures(self, client: TestClient, email: str, password: str) -> None:
        """Test bad credentials return 401 with one message."""
        register(client)

        response = client.post(f"{BASE}/login", json={"email": email, "password": password})

        assert response.status_code == 401
        assert response.json() == {
            "code": "unauthenticated",
            "detail": "Invalid email or password",
        }

    def test_me_requires_session(self, client: TestClient) -> None:
        """Test missing, blank and unknown tokens return 401."""
        assert client.get(f"{BASE}/me").status_code == 401
        assert client.get(f"{BASE}/me", headers={HEADER: "  "}).status_code == 401
        assert client.get(f"{BASE}/me", headers={HEADER: str(uuid4())}).status_code == 401

    def test_logout(self, client: TestClient) -> None:
        """Test a logged-out session can no longer be used."""
        register(client)
        token = login(client)

        response = client.post(f"{BASE}/logout", headers={HEADER: token})
        assert response.status_code == 200
        assert response.json() == {"message": "Logged out"}

        assert client.get(f"{BASE}/me", headers={HEADER: token}).status_code == 401


class TestUserEndpoints:
    """Tests for reads, updates and deletes by id."""

    def test_get_user(self, client: TestClient) -> None:
        """Test fetching a user by id."""
        created = register(client)

        response = client.get(f"{BASE}/{created['user_id']}")

        assert response.status_code == 200
        assert response.json()["email"] == "ada@example.com"

    def test_get_user_errors(self, client: TestClient) -> None:
        """Test malformed ids return 400 and unknown ids 404."""
        assert client.get(f"{BASE}/not-a-uuid").status_code == 400
        response = client.get(f"{BASE}/{uuid4()}")
        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    def test_update_user(self, client: TestClient) -> None:
        """Test partial updates keep omitted fields and are visible on read."""
        created = register(client)
        client.get(f"{BASE}/{created['user_id']}")

        response = client.put(
            f"{BASE}/{created['user_id']}",
            json={"city": "London", "first_name": "", "postcode": 0},
        )

        assert response.status_code == 200
        assert response.json()["city"] == "London"
        assert response.json()["first_name"] == "Ada"

        fetched = client.get(f"{BASE}/{created['user_id']}").json()
        assert fetched["city"] == "London"

    def test_update_email_conflict(self, client: TestClient) -> None:
        """Test changing email to a taken address returns 409."""
        register(client)
        grace = register(client, email="grace@example.com", first_name="Grace")

        response = client.put(f"{BASE}/{grace['user_id']}", json={"email": "ada@example.com"})

        assert response.status_code == 409

    def test_update_role(self, client: TestClient) -> None:
        """Test role changes."""
        created = register(client)

        response = client.put(f"{BASE}/{created['user_id']}/role", json={"role": "admin"})

        assert response.status_code == 200
        assert response.json()["role"] == "admin"
        assert client.get(f"{BASE}/{created['user_id']}").json()["role"] == "admin"

    def test_update_missing_user(self, client: TestClient) -> None:
        """Test updating an unknown user returns 404."""
        response = client.put(f"{BASE}/{uuid4()}", json={"city": "London"})
        assert response.status_code == 404

    def test_delete_user(self, client: TestClient) -> None:
        """Test deletion and repeated deletion."""
        created = register(client)
        client.get(f"{BASE}/{created['user_id']}")

        response = client.delete(f"{BASE}/{created['user_id']}")
        assert response.status_code == 200
        assert response.json() == {"message": "User deleted"}

        assert client.get(f"{BASE}/{created['user_id']}").status_code == 404
        assert client.delete(f"{BASE}/{created['user_id']}").status_code == 404


class TestListingEndpoints:
    """Tests for listing and search."""

    def test_list_users(self, client: TestClient) -> None:
        """Test pagination metadata for 25 users."""
        for i in range(25):
            register(client, email=f"user{i:02d}@example.com", first_name=f"User{i:02d}")

        first = client.get(BASE, params={"page": 1, "size": 10}).json()
        last = client.get(BASE, params={"page": 3, "size": 10}).json()

        assert first["total_count"] == 25
        assert first["total_pages"] == 3
        assert first["has_more"] is True
        assert len(first["users"]) == 10
        assert last["has_more"] is False
        assert len(last["users"]) == 5

    def test_list_defaults(self, client: TestClient) -> None:
        """Test size 0 and page 0 fall back to defaults."""
        register(client)

        data = client.get(BASE, params={"page": 0, "size": 0}).json()

        assert data["page"] == 1
        assert data["size"] == 10
        assert data["total_count"] == 1

    def test_list_empty(self, client: TestClient) -> None:
        """Test an empty directory."""
        data = client.get(BASE).json()
        assert data == {
            "total_count": 0,
            "total_pages": 0,
            "page": 1,
            "size": 10,
            "has_more": False,
            "users": [],
        }

    def test_search(self, client: TestClient) -> None:
        """Test name search."""
        register(client)
        register(client, email="grace@example.com", first_name="Grace", last_name="Hopper")

        data = client.get(f"{BASE}/search", params={"name": "hop"}).json()

        assert data["total_count"] == 1
        assert data["users"][0]["first_name"] == "Grace"
