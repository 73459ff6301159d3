import pytest

from officer_records.routers import auth


AUTH = "/api/v1/auth"


def register_and_login(client, email="instructor@navy.example", password="s3cret-pass"):
    assert client.post(f"{AUTH}/create", json={"email": email, "password": password}).status_code == 201
    r = client.post(f"{AUTH}/login", json={"email": email, "password": password})
    assert r.status_code == 200
    return r.json()


class TestAccounts:
    def test_duplicate_email_conflicts(self, client):
        register_and_login(client)

        r = client.post(f"{AUTH}/create", json={"email": "instructor@navy.example", "password": "other"})

        assert r.status_code == 409

    def test_wrong_password(self, client):
        register_and_login(client)

        r = client.post(f"{AUTH}/login", json={"email": "instructor@navy.example", "password": "nope"})

        assert r.status_code == 401

    def test_unknown_email(self, client):
        r = client.post(f"{AUTH}/login", json={"email": "nobody@navy.example", "password": "x"})
        assert r.status_code == 401

    def test_password_is_hashed(self, client, store):
        register_and_login(client)

        stored = store.query("credentials")[0].get("password")

        assert stored != "s3cret-pass"
        assert auth.verify_password("s3cret-pass", stored)


class TestTokens:
    def test_login_returns_access_token_and_cookie(self, client, store):
        body = register_and_login(client)

        assert body["message"] == "Login successful"
        assert body["expiresIn"].endswith("m")
        assert "refreshToken" in client.cookies
        assert store.get("refreshTokens", body["id"]) is not None

        me = client.get(f"{AUTH}/me", headers={"Authorization": f"Bearer {body['accessToken']}"})
        assert me.json()["email"] == "instructor@navy.example"

    def test_me_without_token(self, client):
        assert client.get(f"{AUTH}/me").status_code == 401

    def test_me_with_garbage_token(self, client):
        assert client.get(f"{AUTH}/me", headers={"Authorization": "Bearer garbage"}).status_code == 403

    def test_refresh_issues_new_access_token(self, client):
        register_and_login(client)

        r = client.post(f"{AUTH}/refresh")

        assert r.status_code == 200
        assert r.json()["accessToken"]

    def test_refresh_without_cookie(self, client):
        assert client.post(f"{AUTH}/refresh").status_code == 401

    def test_logout_revokes_refresh_token(self, client, store):
        body = register_and_login(client)

        assert client.post(f"{AUTH}/logout").status_code == 200

        assert store.get("refreshTokens", body["id"]) is None

    def test_logout_without_cookie(self, client):
        assert client.post(f"{AUTH}/logout").status_code == 400


class TestRequireAuth:
    @pytest.fixture
    def enforced(self, monkeypatch):
        monkeypatch.setattr(auth.settings, "require_auth", True)

    def test_open_by_default(self, client):
        assert client.get("/api/v1/data-entry/officer").status_code == 200

    def test_rejects_anonymous_when_enforced(self, client, enforced):
        assert client.get("/api/v1/data-entry/officer").status_code == 401

    def test_accepts_bearer_when_enforced(self, client, enforced):
        body = register_and_login(client)

        r = client.get("/api/v1/data-entry/officer", headers={"Authorization": f"Bearer {body['accessToken']}"})

        assert r.status_code == 200
