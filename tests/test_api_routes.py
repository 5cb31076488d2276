"""
tests/test_api_routes.py -- Integration tests for the forum REST routes.

These tests exercise the full stack: FastAPI routing -> credential extraction
-> services and stores -> response model serialization and the shared error
envelope.

Coverage:
  - signup / signin / signout round trip, including the access-token header
  - uniform signin failures by default, distinct codes when disabled
  - 401 without a token, 403 on someone else's question, 404 on unknown ids
  - question and answer CRUD happy paths
  - admin-only user removal
"""

from __future__ import annotations

from fastapi.testclient import TestClient


SIGNUP = "/api/v1/user/signup"
SIGNIN = "/api/v1/user/signin"
SIGNOUT = "/api/v1/user/signout"


def _signup(client: TestClient, username: str, password: str = "pw1", email: str | None = None):
    return client.post(
        SIGNUP,
        json={
            "user_name": username,
            "email_address": email or f"{username}@example.com",
            "password": password,
            "first_name": username.title(),
            "country": "NZ",
        },
    )


class TestApiAuthRoutes:
    def test_signup_returns_201(self, api_client) -> None:
        client, _services = api_client
        resp = _signup(client, "alice")
        assert resp.status_code == 201, f"Expected 201, got {resp.status_code}: {resp.text}"
        data = resp.json()
        assert data["status"] == "USER SUCCESSFULLY REGISTERED"
        assert data["id"]

    def test_signup_duplicate_username(self, api_client) -> None:
        client, _services = api_client
        _signup(client, "alice")
        resp = _signup(client, "alice", email="other@example.com")
        assert resp.status_code == 409, f"Expected 409, got {resp.status_code}: {resp.text}"
        assert resp.json()["error"]["code"] == "SGR-001"

    def test_signup_duplicate_email(self, api_client) -> None:
        client, _services = api_client
        _signup(client, "alice", email="a@example.com")
        resp = _signup(client, "bob", email="a@example.com")
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "SGR-002"

    def test_signup_rejects_malformed_email(self, api_client) -> None:
        client, _services = api_client
        resp = _signup(client, "alice", email="not-an-email")
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "validation_error"

    def test_signup_rejects_password_over_72_bytes(self, api_client) -> None:
        client, services = api_client
        # 64 characters, 128 bytes in UTF-8.
        resp = _signup(client, "alice", password="\u00e9" * 64)
        assert resp.status_code == 422, f"Expected 422, got {resp.status_code}: {resp.text}"
        assert resp.json()["error"]["code"] == "validation_error"
        with services.db.transaction() as conn:
            assert services.authenticator.users.get_by_username(conn, "alice") is None

    def test_signup_accepts_multibyte_password_within_72_bytes(self, api_client, basic_auth) -> None:
        client, _services = api_client
        password = "\u00e9" * 36
        resp = _signup(client, "alice", password=password)
        assert resp.status_code == 201, f"Expected 201, got {resp.status_code}: {resp.text}"
        resp = client.post(SIGNIN, headers=basic_auth("alice", password))
        assert resp.status_code == 200, f"Expected 200, got {resp.status_code}: {resp.text}"

    def test_signin_returns_token_in_header_and_body(self, api_client, basic_auth) -> None:
        client, _services = api_client
        user_id = _signup(client, "alice").json()["id"]
        resp = client.post(SIGNIN, headers=basic_auth("alice", "pw1"))
        assert resp.status_code == 200, f"Expected 200, got {resp.status_code}: {resp.text}"
        data = resp.json()
        assert data["id"] == user_id
        assert data["message"] == "SIGNED IN SUCCESSFULLY"
        assert data["access_token"] == resp.headers["access-token"]
        assert resp.headers["cache-control"] == "no-store"

    def test_signin_failures_are_uniform_by_default(self, api_client, basic_auth) -> None:
        client, _services = api_client
        _signup(client, "alice")
        unknown = client.post(SIGNIN, headers=basic_auth("nobody", "pw1"))
        wrong = client.post(SIGNIN, headers=basic_auth("alice", "wrong"))
        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json() == wrong.json()
        assert unknown.json()["error"]["code"] == "bad_credentials"

    def test_signin_failures_distinct_when_configured(self, make_client, basic_auth) -> None:
        client, _services = make_client(uniform_signin_errors=False)
        _signup(client, "alice")
        unknown = client.post(SIGNIN, headers=basic_auth("nobody", "pw1"))
        wrong = client.post(SIGNIN, headers=basic_auth("alice", "wrong"))
        assert unknown.json()["error"]["code"] == "ATH-001"
        assert wrong.json()["error"]["code"] == "ATH-002"

    def test_signin_without_basic_header(self, api_client) -> None:
        client, _services = api_client
        resp = client.post(SIGNIN)
        assert resp.status_code == 401
        assert resp.headers["www-authenticate"] == "Basic"
        assert resp.json()["error"]["code"] == "bad_credentials"

    def test_malformed_basic_header_is_uniform(self, api_client, basic_auth) -> None:
        client, _services = api_client
        _signup(client, "alice")
        malformed = client.post(SIGNIN, headers={"Authorization": "Basic %%%"})
        wrong = client.post(SIGNIN, headers=basic_auth("alice", "wrong"))
        assert malformed.status_code == 401, f"Expected 401, got {malformed.status_code}: {malformed.text}"
        assert malformed.json() == wrong.json()
        assert malformed.headers["www-authenticate"] == "Basic"
        assert malformed.headers["cache-control"] == "no-store"

    def test_malformed_basic_header_distinct_when_configured(self, make_client) -> None:
        client, _services = make_client(uniform_signin_errors=False)
        resp = client.post(SIGNIN, headers={"Authorization": "Basic %%%"})
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "ATH-002"

    def test_signout_then_reuse(self, api_client, bearer, member) -> None:
        client, _services = api_client
        user_id, token = member(client, "alice")
        resp = client.post(SIGNOUT, headers=bearer(token))
        assert resp.status_code == 200, f"Expected 200, got {resp.status_code}: {resp.text}"
        assert resp.json() == {"id": user_id, "message": "SIGNED OUT SUCCESSFULLY"}

        again = client.post(SIGNOUT, headers=bearer(token))
        assert again.status_code == 401
        assert again.json()["error"]["code"] == "SGO-002"

        create = client.post("/api/v1/question/create", json={"content": "Q"}, headers=bearer(token))
        assert create.status_code == 401
        assert create.json()["error"]["code"] == "ATHR-002"

    def test_signout_unknown_token(self, api_client, bearer) -> None:
        client, _services = api_client
        resp = client.post(SIGNOUT, headers=bearer("nope"))
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "SGO-001"

    def test_signout_without_token(self, api_client) -> None:
        client, _services = api_client
        resp = client.post(SIGNOUT)
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "ATHR-001"

    def test_bare_token_accepted(self, api_client, member) -> None:
        client, _services = api_client
        _user_id, token = member(client, "alice")
        resp = client.get("/api/v1/question/all", headers={"Authorization": token})
        assert resp.status_code == 200, f"Expected 200, got {resp.status_code}: {resp.text}"


class TestApiQuestionRoutes:
    def test_question_lifecycle(self, api_client, bearer, member) -> None:
        """alice asks, bob cannot edit, alice edits and deletes."""
        client, _services = api_client
        alice_id, alice = member(client, "alice")
        _bob_id, bob = member(client, "bob")

        resp = client.post("/api/v1/question/create", json={"content": "Q1"}, headers=bearer(alice))
        assert resp.status_code == 201, f"Expected 201, got {resp.status_code}: {resp.text}"
        assert resp.json()["status"] == "QUESTION CREATED"
        question_id = resp.json()["id"]

        resp = client.put(f"/api/v1/question/edit/{question_id}", json={"content": "X"}, headers=bearer(bob))
        assert resp.status_code == 403, f"Expected 403, got {resp.status_code}: {resp.text}"
        assert resp.json()["error"]["code"] == "ATHR-003"

        listed = client.get("/api/v1/question/all", headers=bearer(bob)).json()
        assert listed == [{"id": question_id, "content": "Q1"}]

        resp = client.put(f"/api/v1/question/edit/{question_id}", json={"content": "Q1b"}, headers=bearer(alice))
        assert resp.status_code == 200
        assert resp.json() == {"id": question_id, "status": "QUESTION EDITED"}

        by_user = client.get(f"/api/v1/question/all/{alice_id}", headers=bearer(bob)).json()
        assert by_user == [{"id": question_id, "content": "Q1b"}]

        resp = client.delete(f"/api/v1/question/delete/{question_id}", headers=bearer(alice))
        assert resp.status_code == 200
        assert resp.json()["status"] == "QUESTION DELETED"
        assert client.get("/api/v1/question/all", headers=bearer(alice)).json() == []

    def test_list_requires_token(self, api_client) -> None:
        client, _services = api_client
        resp = client.get("/api/v1/question/all")
        assert resp.status_code == 401
        assert resp.headers["www-authenticate"] == "Bearer"
        assert resp.json()["error"]["code"] == "ATHR-001"

    def test_edit_unknown_question(self, api_client, bearer, member) -> None:
        client, _services = api_client
        _user_id, token = member(client, "alice")
        resp = client.put("/api/v1/question/edit/missing", json={"content": "x"}, headers=bearer(token))
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "QUES-001"

    def test_blank_content_rejected(self, api_client, bearer, member) -> None:
        client, _services = api_client
        _user_id, token = member(client, "alice")
        resp = client.post("/api/v1/question/create", json={"content": "   "}, headers=bearer(token))
        assert resp.status_code == 422

    def test_admin_can_delete_question(self, api_client, signed_in_admin, bearer, member) -> None:
        client, services = api_client
        _alice_id, alice = member(client, "alice")
        _admin, admin_token = signed_in_admin(services)
        question_id = client.post("/api/v1/question/create", json={"content": "Q1"}, headers=bearer(alice)).json()[
            "id"
        ]
        resp = client.delete(f"/api/v1/question/delete/{question_id}", headers=bearer(admin_token))
        assert resp.status_code == 200, f"Expected 200, got {resp.status_code}: {resp.text}"


class TestApiAnswerRoutes:
    def test_answer_lifecycle(self, api_client, bearer, member) -> None:
        client, _services = api_client
        _alice_id, alice = member(client, "alice")
        _bob_id, bob = member(client, "bob")
        question_id = client.post("/api/v1/question/create", json={"content": "Q1"}, headers=bearer(alice)).json()[
            "id"
        ]

        resp = client.post(
            f"/api/v1/question/{question_id}/answer/create", json={"content": "A1"}, headers=bearer(bob)
        )
        assert resp.status_code == 201, f"Expected 201, got {resp.status_code}: {resp.text}"
        assert resp.json()["status"] == "ANSWER CREATED"
        answer_id = resp.json()["id"]

        listed = client.get(f"/api/v1/answer/all/{question_id}", headers=bearer(alice)).json()
        assert listed == [{"id": answer_id, "question_content": "Q1", "answer_content": "A1"}]

        resp = client.put(f"/api/v1/answer/edit/{answer_id}", json={"content": "nope"}, headers=bearer(alice))
        assert resp.status_code == 403

        resp = client.put(f"/api/v1/answer/edit/{answer_id}", json={"content": "A1b"}, headers=bearer(bob))
        assert resp.json() == {"id": answer_id, "status": "ANSWER EDITED"}

        resp = client.delete(f"/api/v1/answer/delete/{answer_id}", headers=bearer(bob))
        assert resp.json() == {"id": answer_id, "status": "ANSWER DELETED"}
        assert client.get(f"/api/v1/answer/all/{question_id}", headers=bearer(alice)).json() == []

    def test_answer_unknown_question(self, api_client, bearer, member) -> None:
        client, _services = api_client
        _user_id, token = member(client, "alice")
        resp = client.post("/api/v1/question/missing/answer/create", json={"content": "A"}, headers=bearer(token))
        assert resp.status_code == 404
        assert resp.json()["error"]["message"] == "The question entered is invalid."

    def test_delete_unknown_answer(self, api_client, bearer, member) -> None:
        client, _services = api_client
        _user_id, token = member(client, "alice")
        resp = client.delete("/api/v1/answer/delete/missing", headers=bearer(token))
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "ANS-001"


class TestApiUserRoutes:
    def test_user_profile(self, api_client, bearer, member) -> None:
        client, _services = api_client
        alice_id = _signup(client, "alice").json()["id"]
        _bob_id, bob = member(client, "bob")
        resp = client.get(f"/api/v1/userprofile/{alice_id}", headers=bearer(bob))
        assert resp.status_code == 200, f"Expected 200, got {resp.status_code}: {resp.text}"
        data = resp.json()
        assert data["user_name"] == "alice"
        assert data["first_name"] == "Alice"
        assert data["country"] == "NZ"
        assert "password" not in data
        assert "salt" not in data

    def test_non_admin_cannot_delete_user(self, api_client, bearer, member) -> None:
        client, _services = api_client
        alice_id, _alice = member(client, "alice")
        _bob_id, bob = member(client, "bob")
        resp = client.delete(f"/api/v1/admin/user/{alice_id}", headers=bearer(bob))
        assert resp.status_code == 403
        assert resp.json()["error"]["message"] == "Unauthorized Access, Entered user is not an admin."

    def test_admin_deletes_user(self, api_client, signed_in_admin, bearer, member) -> None:
        client, services = api_client
        alice_id, alice = member(client, "alice")
        _admin, admin_token = signed_in_admin(services)
        resp = client.delete(f"/api/v1/admin/user/{alice_id}", headers=bearer(admin_token))
        assert resp.status_code == 200, f"Expected 200, got {resp.status_code}: {resp.text}"
        assert resp.json() == {"id": alice_id, "status": "USER SUCCESSFULLY DELETED"}
        # The deleted member's token no longer resolves.
        resp = client.get("/api/v1/question/all", headers=bearer(alice))
        assert resp.status_code == 401


class TestApiMisc:
    def test_unknown_path_uses_error_envelope(self, api_client) -> None:
        client, _services = api_client
        resp = client.get("/api/v1/nope")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "http_404"
