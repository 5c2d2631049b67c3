"""
Tests for user and preference endpoints
=======================================
Tests cover:
- User creation, duplicates and validation
- Preferred mood updates
- Preference lookup and partial updates
"""

import pytest


@pytest.fixture
def user(client):
    resp = client.post(
        "/api/users",
        json={"username": "ann", "password": "pw", "ageGroup": "Adult"},
    )
    assert resp.status_code == 201
    return resp.get_json()


class TestCreateUser:
    """Tests for POST /api/users."""

    def test_creates_user_with_default_preferences(self, user):
        assert user["user"] == {
            "id": 1,
            "username": "ann",
            "ageGroup": "Adult",
            "preferredMood": None,
        }
        assert user["preferences"]["userId"] == 1
        assert user["preferences"]["volume"] == 70
        assert user["preferences"]["voiceEnabled"] is True

    def test_duplicate_username(self, client, user):
        resp = client.post(
            "/api/users",
            json={"username": "ann", "password": "x", "ageGroup": "Kid"},
        )
        assert resp.status_code == 409
        assert resp.get_json()["message"] == "Username already exists"

    def test_conflict_reported_by_storage(self, client, user, monkeypatch):
        """A lookup that misses a concurrent insert still yields 409."""
        from serenity_core.storage import get_storage

        storage = get_storage()
        monkeypatch.setattr(storage, "get_user_by_username", lambda username: None)
        resp = client.post(
            "/api/users",
            json={"username": "ann", "password": "x", "ageGroup": "Kid"},
        )
        assert resp.status_code == 409
        assert storage.stats()["users"] == 1
        assert storage.stats()["preferences"] == 1

    @pytest.mark.parametrize(
        "body",
        [
            {"username": "bob", "password": "pw"},
            {"username": "bob", "password": "pw", "ageGroup": "Teen"},
            {"username": "", "password": "pw", "ageGroup": "Kid"},
            {"username": "bob", "password": "pw", "ageGroup": "Kid", "preferredMood": "Grumpy"},
        ],
    )
    def test_invalid_body(self, client, body):
        resp = client.post("/api/users", json=body)
        assert resp.status_code == 400
        data = resp.get_json()
        assert data["message"] == "Invalid user data"
        assert data["errors"]

    def test_non_json_body(self, client):
        resp = client.post("/api/users", data="nope", content_type="text/plain")
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "invalid_json"

    def test_preferred_mood_on_create(self, client):
        resp = client.post(
            "/api/users",
            json={"username": "cat", "password": "pw", "ageGroup": "Mature", "preferredMood": "Calm"},
        )
        assert resp.status_code == 201
        assert resp.get_json()["user"]["preferredMood"] == "Calm"

    def test_get_user(self, client, user):
        assert client.get("/api/users/1").get_json()["username"] == "ann"
        assert client.get("/api/users/99").status_code == 404


class TestPreferredMood:
    """Tests for PUT /api/users/<id>/preferred-mood."""

    def test_update(self, client, user):
        resp = client.put("/api/users/1/preferred-mood", json={"mood": "Happy"})
        assert resp.status_code == 200
        assert resp.get_json()["preferredMood"] == "Happy"

    def test_invalid_mood(self, client, user):
        resp = client.put("/api/users/1/preferred-mood", json={"mood": "happy"})
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Invalid mood"

    def test_unknown_user(self, client):
        resp = client.put("/api/users/42/preferred-mood", json={"mood": "Happy"})
        assert resp.status_code == 404


class TestPreferences:
    """Tests for preference endpoints."""

    def test_get_preferences(self, client, user):
        resp = client.get("/api/users/1/preferences")
        assert resp.status_code == 200
        assert resp.get_json()["brightness"] == 60

    def test_missing_preferences(self, client):
        assert client.get("/api/users/5/preferences").status_code == 404

    def test_partial_update(self, client, user):
        pref_id = user["preferences"]["id"]
        resp = client.put(f"/api/preferences/{pref_id}", json={"animationSpeed": 80, "voiceEnabled": False})
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["animationSpeed"] == 80
        assert data["voiceEnabled"] is False
        assert data["volume"] == 70

    def test_out_of_range(self, client, user):
        resp = client.put("/api/preferences/1", json={"brightness": 5})
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Invalid preferences data"

    def test_unknown_preference(self, client):
        resp = client.put("/api/preferences/9", json={"volume": 10})
        assert resp.status_code == 404
