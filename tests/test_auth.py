from travel_planner import db
from travel_planner.models import Profile, User


def test_register_creates_user_and_profile(client):
    response = client.post(
        "/api/auth/register",
        json={"email": "Ana@Example.com", "password": "secret123", "username": "ana", "full_name": "Ana Lima"},
    )
    assert response.status_code == 201
    payload = response.get_json()
    assert payload["success"] is True
    assert payload["user"]["email"] == "ana@example.com"
    assert len(payload["user"]["publicId"]) == 8

    profile = Profile.query.filter_by(username="ana").one()
    assert profile.full_name == "Ana Lima"
    assert profile.online is True

    me = client.get("/api/user/me")
    assert me.status_code == 200
    assert me.get_json()["id"] == payload["user"]["id"]


def test_register_validates_fields(client):
    response = client.post("/api/auth/register", json={"email": "nope", "password": "secret123", "username": "ana"})
    assert response.status_code == 400
    assert response.get_json()["message"] == "Please provide a valid email address."

    response = client.post(
        "/api/auth/register", json={"email": "a@example.com", "password": "123", "username": "ana"}
    )
    assert response.status_code == 400

    response = client.post(
        "/api/auth/register", json={"email": "a@example.com", "password": "secret123", "username": "bad name"}
    )
    assert response.status_code == 400
    assert response.get_json()["message"] == "Username contains invalid characters."


def test_register_rejects_duplicates(client, make_user):
    make_user("ana")
    response = client.post(
        "/api/auth/register", json={"email": "ana@example.com", "password": "secret123", "username": "other"}
    )
    assert response.status_code == 409

    response = client.post(
        "/api/auth/register", json={"email": "new@example.com", "password": "secret123", "username": "ANA"}
    )
    assert response.status_code == 409
    assert response.get_json()["message"] == "Username already taken."


def test_login_and_logout(client, make_user):
    user = make_user()
    bad = client.post("/api/auth/login", json={"email": user.email, "password": "wrong-pass"})
    assert bad.status_code == 401

    missing = client.post("/api/auth/login", json={"email": user.email})
    assert missing.status_code == 400

    ok = client.post("/api/auth/login", json={"email": user.email, "password": "secret123"})
    assert ok.status_code == 200
    db.session.expire_all()
    assert db.session.get(User, user.id).profile.online is True

    assert client.post("/api/auth/logout").get_json() == {"ok": True}
    db.session.expire_all()
    assert db.session.get(User, user.id).profile.online is False
    assert client.get("/api/user/me").status_code == 401


def test_login_survives_presence_failure(client, make_user, monkeypatch):
    user = make_user()

    def broken(*_args, **_kwargs):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr("travel_planner.api.auth.set_online_status", broken)
    response = client.post("/api/auth/login", json={"email": user.email, "password": "secret123"})
    assert response.status_code == 200


def test_csrf_token_endpoint(client):
    response = client.get("/api/auth/csrf")
    assert response.status_code == 200
    assert response.get_json()["csrfToken"]


def test_separate_clients_keep_separate_sessions(app, make_user, login):
    alice, bob = make_user("alice"), make_user("bob")
    alice_client = login(alice, test_client=app.test_client())
    bob_client = login(bob, test_client=app.test_client())

    assert alice_client.get("/api/user/me").get_json()["id"] == alice.id
    assert bob_client.get("/api/user/me").get_json()["id"] == bob.id
    assert alice_client.get("/api/user/me").get_json()["id"] == alice.id


def test_protected_routes_answer_json_401(client):
    for method, url in [
        ("get", "/api/user/me"),
        ("get", "/api/friends"),
        ("post", "/api/groups"),
        ("post", "/api/user/avatar/default"),
    ]:
        response = getattr(client, method)(url)
        assert response.status_code == 401
        assert response.get_json() == {"error": "Not authenticated"}
