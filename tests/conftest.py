import pytest

from api import create_app


@pytest.fixture
def app():
    app = create_app("testing")
    yield app
    app.extensions["storage"].dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def service(app):
    return app.extensions["auth_service"]


@pytest.fixture
def storage(app):
    return app.extensions["storage"]


@pytest.fixture
def register(client):
    def _register(username="alice", email="a@x.com", password="pw1"):
        return client.post(
            "/api/auth/register",
            json={"username": username, "email": email, "password": password},
        )
    return _register


@pytest.fixture
def login(client):
    def _login(email="a@x.com", password="pw1"):
        return client.post("/api/auth/login", json={"email": email, "password": password})
    return _login
