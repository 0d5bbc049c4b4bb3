import asyncio

from fastapi.testclient import TestClient
from piguard import main
from piguard.main import app

client = TestClient(app)

def test_health_check():
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}

def test_metrics_requires_login():
    response = client.get("/api/metrics")
    assert response.status_code == 401
    assert response.json() == {"error": "Authentication required"}

def test_metrics_endpoint(admin_client, robot):
    robot.reply("/images", [{"filename": "a.jpg", "url": "/images/a.jpg"}])
    admin_client.get("/api/robot-db/camera")

    response = admin_client.get("/api/metrics")
    assert response.status_code == 200
    data = response.json()
    assert set(data["caches"]) == {
        "image_cache", "log_file_cache", "arduino_log_cache", "pi_system_cache", "gps_track_cache"
    }
    assert data["caches"]["image_cache"]["rows"] == 1
    assert data["caches"]["image_cache"]["latest_timestamp"] is not None
    assert data["caches"]["log_file_cache"] == {"rows": 0, "latest_timestamp": None}
    assert data["users"] == {"ADMIN": 1}

def test_cors_preflight_on_robot_routes():
    response = client.options(
        "/api/robot-db/status",
        headers={"Origin": "http://dashboard.local", "Access-Control-Request-Method": "GET"},
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"

def test_websocket_without_redis():
    with client.websocket_connect("/ws") as websocket:
        assert websocket.receive_text() == "Redis not connected"

class FakePubSub:
    def __init__(self, payloads):
        self.payloads = list(payloads)
        self.loop_running = []
        self.closed = False

    def get_message(self, ignore_subscribe_messages=False, timeout=0.0):
        try:
            asyncio.get_running_loop()
            self.loop_running.append(True)
        except RuntimeError:
            self.loop_running.append(False)
        if self.payloads:
            return {"type": "message", "data": self.payloads.pop(0)}
        return None

    def close(self):
        self.closed = True

def test_websocket_relays_updates_off_the_event_loop(monkeypatch):
    fake = FakePubSub([b'{"resource": "gps", "metadata": {"points": 3}}'])
    monkeypatch.setattr(main, "subscribe", lambda: fake)

    with client.websocket_connect("/ws") as websocket:
        assert websocket.receive_text() == '{"resource": "gps", "metadata": {"points": 3}}'

    assert fake.loop_running and not any(fake.loop_running)
    assert fake.closed
