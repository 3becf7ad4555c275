"""Unit tests for main application endpoints."""

from unittest.mock import Mock


class TestAppEndpoints:
    """Test main application endpoints."""

    def test_index_endpoint(self, client):
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert "version" in data
        assert data["status"] == "ok"

    def test_get_current_user_info_unauthenticated(self, client):
        response = client.get("/user/me")
        assert response.status_code == 200
        assert response.json()["user"] is None

    def test_get_current_user_info_authenticated(self, client, alice, login):
        login(alice)
        response = client.get("/user/me")
        assert response.status_code == 200
        user_data = response.json()["user"]
        assert user_data["id"] == alice.id
        assert user_data["username"] == "alice"
        assert "created_time" in user_data

    def test_protected_routes_need_a_user(self, client):
        response = client.get("/friends")
        assert response.status_code == 401

    def test_logout_endpoint(self, client):
        response = client.post("/logout")
        assert response.status_code == 200
        assert response.json()["message"] == "Logged out successfully"

    def test_set_username(self, client, alice, bob, login):
        login(alice)
        response = client.post("/user/username", json={"username": "alice_b"})
        assert response.status_code == 200
        assert response.json()["user"]["username"] == "alice_b"

        response = client.post("/user/username", json={"username": "bob"})
        assert response.status_code == 409
        assert response.json()["code"] == "username_taken"

        response = client.post("/user/username", json={"username": "no spaces"})
        assert response.status_code == 400

    def test_set_name(self, client, alice, login):
        login(alice)
        response = client.post("/user/name", json={"name": "  Alice Liddell "})
        assert response.status_code == 200
        assert response.json()["user"]["name"] == "Alice Liddell"

        for bad_name in ("   ", "x" * 51):
            response = client.post("/user/name", json={"name": bad_name})
            assert response.status_code == 400
            assert response.json()["code"] == "invalid_content"
        assert client.get("/user/me").json()["user"]["name"] == "Alice Liddell"

    def test_username_exists(self, client, alice):
        response = client.get("/username/exists/alice")
        assert response.status_code == 200
        assert response.json() == {"exists": True}

        assert client.get("/username/exists/free_name").json() == {"exists": False}

        response = client.get("/username/exists/bad name")
        assert response.status_code == 400
        assert response.json()["code"] == "invalid_content"

    def test_user_profile(self, client, alice, bob, login):
        login(alice)
        response = client.get("/users/bob")
        assert response.status_code == 200
        data = response.json()
        assert data["user"]["id"] == bob.id
        assert data["relationship"] == "none"

        response = client.get("/users/nobody")
        assert response.status_code == 404


class TestUtilityFunctions:
    def test_get_version(self):
        from routes.user_route import get_version

        version = get_version()
        assert isinstance(version, str)
        assert len(version) > 0

    def test_get_current_user_id_with_session(self):
        from routes.deps import get_current_user_id

        mock_request = Mock()
        mock_request.session = {"user_id": "12"}
        assert get_current_user_id(mock_request) == 12

    def test_get_current_user_id_without_session(self):
        from routes.deps import get_current_user_id

        mock_request = Mock()
        mock_request.session = {}
        assert get_current_user_id(mock_request) is None

        mock_request.session = {"user_id": "not-a-number"}
        assert get_current_user_id(mock_request) is None

    def test_get_current_user_with_valid_user(self, test_session, alice):
        from routes.deps import get_current_user

        mock_request = Mock()
        mock_request.session = {"user_id": alice.id}
        user = get_current_user(mock_request, test_session)
        assert user is not None
        assert user.id == alice.id

    def test_get_current_user_with_invalid_user(self, test_session):
        from routes.deps import get_current_user

        mock_request = Mock()
        mock_request.session = {"user_id": 999}
        assert get_current_user(mock_request, test_session) is None
