import json
import sqlite3

import pytest

from piguard import database, pubsub
from piguard.models import PiSystemReading
from piguard.seed import seed_admin

def test_prune_keeps_newest_rows():
    for i in range(35):
        database.cache_log_files([(f"log{i}.json", f"/log/log{i}.json")], 30)

    rows = database.cached_log_files(limit=100)
    assert len(rows) == 30
    assert rows[0]["filename"] == "log34.json"
    assert rows[-1]["filename"] == "log5.json"

def test_pi_system_timestamp_defaults_to_insert_time():
    reading = PiSystemReading.model_validate({"CPU": "1", "RAM": "2", "CPU Temp": "3"})
    database.cache_pi_system(reading, 10)

    row = database.latest_pi_system()
    assert row["timestamp"] == row["created_at"]
    assert row["gpu_temp"] == "0"

def test_email_is_unique():
    database.create_user("a@example.com", "a", "hash")
    with pytest.raises(sqlite3.IntegrityError):
        database.create_user("a@example.com", "a", "hash")

def test_seed_admin_is_idempotent():
    first = seed_admin("root@example.com", "pw")
    assert first["role"] == "ADMIN"
    database.set_user_role(first["id"], "USER")

    second = seed_admin("root@example.com", "other")
    assert second["id"] == first["id"]
    assert second["role"] == "ADMIN"
    assert second["password"] == first["password"]

class FakeRedis:
    def __init__(self):
        self.published = []

    def publish(self, channel, message):
        self.published.append((channel, json.loads(message)))

def test_publish_telemetry_event(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(pubsub, "redis_client", fake)

    assert pubsub.publish_telemetry_event("camera", {"filename": "a.jpg"})
    assert fake.published == [
        ("telemetry_updates", {"resource": "camera", "metadata": {"filename": "a.jpg"}})
    ]

def test_publish_disabled_without_redis():
    assert pubsub.redis_client is None
    assert pubsub.publish_telemetry_event("camera", {}) is False

def test_new_session_prunes_expired_ones():
    user = database.create_user("a@example.com", "a", "hash")
    database.create_session("stale", user["id"], "2000-01-01T00:00:00.000Z")
    database.create_session("fresh", user["id"], "2999-01-01T00:00:00.000Z")

    assert database.get_session_user("stale") is None
    assert database.get_session_user("fresh")["email"] == "a@example.com"
