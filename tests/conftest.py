import pytest
from flask import g

from travel_planner import create_app, db
from travel_planner.repositories.users import create_user


@pytest.fixture
def app(tmp_path):
    class TestConfig:
        TESTING = True
        SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
        WTF_CSRF_ENABLED = False
        SECRET_KEY = "test-secret"
        UPLOAD_FOLDER = str(tmp_path / "uploads")
        AVATAR_LIBRARY_FOLDER = str(tmp_path / "avatars")
        MAX_UPLOAD_MB = 1

    app = create_app(TestConfig)

    @app.before_request
    def _reset_login_cache():
        # test requests share the fixture's app context, so drop the user Flask-Login cached on g
        g.pop("_login_user", None)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make_user(username=None, password="secret123", full_name=None):
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        return create_user(f"{username}@example.com", username, password, full_name=full_name)

    return _make_user


@pytest.fixture
def login(client):
    def _login(user, password="secret123", test_client=None):
        test_client = test_client or client
        response = test_client.post("/api/auth/login", json={"email": user.email, "password": password})
        assert response.status_code == 200, response.get_json()
        return test_client

    return _login
