import os
import tempfile

_scratch = tempfile.mkdtemp(prefix="pi-guard-tests-")
os.environ["PIGUARD_DB_PATH"] = os.path.join(_scratch, "pi_guard.db")
os.environ["PIGUARD_LOG_PATH"] = os.path.join(_scratch, "pi_guard.log")
os.environ["PIGUARD_REDIS_URL"] = ""
os.environ["BCRYPT_ROUNDS"] = "4"

import httpx
import pytest
from fastapi.testclient import TestClient

from piguard import database, robot_client
from piguard.auth import hash_password
from piguard.main import app

ROBOT = "http://10.146.42.252:8500"

class FakeRobot:
    """Stand-in for the robot API; unknown paths behave like an unreachable host."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def reply(self, path, payload, status=200):
        self.routes[path] = (status, payload)

    def go_offline(self):
        self.routes.clear()

    def __call__(self, request):
        self.requests.append(request)
        if request.url.path not in self.routes:
            raise httpx.ConnectError("robot unreachable", request=request)
        status, payload = self.routes[request.url.path]
        return httpx.Response(status, json=payload)

@pytest.fixture(autouse=True)
def fresh_db(tmp_path, monkeypatch):
    monkeypatch.setattr(database, "DB_PATH", str(tmp_path / "pi_guard.db"))
    database.init_db()

@pytest.fixture
def robot(monkeypatch):
    fake = FakeRobot()
    monkeypatch.setattr(robot_client, "TRANSPORT", httpx.MockTransport(fake))
    return fake

@pytest.fixture
def client(robot):
    return TestClient(app)

@pytest.fixture
def make_user():
    def _make_user(email, password="secret-pass", role="USER", name=None):
        return database.create_user(
            email=email,
            name=name or email.split("@")[0],
            password_hash=hash_password(password),
            role=role,
        )
    return _make_user

@pytest.fixture
def admin_client(client, make_user):
    make_user("admin@example.com", "admin-pass", role="ADMIN", name="Admin")
    response = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "admin-pass"})
    assert response.status_code == 200
    return client
