import json
import os
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import List, Optional

from piguard.config import DB_PATH
from piguard.models import ArduinoReading, PiSystemReading

CACHE_TABLES = {
    "image_cache": "timestamp",
    "log_file_cache": "timestamp",
    "arduino_log_cache": "created_at",
    "pi_system_cache": "created_at",
    "gps_track_cache": "timestamp",
}

def now_iso() -> str:
    return format_iso(datetime.now(timezone.utc))

def format_iso(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

def parse_iso(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))

@contextmanager
def get_connection():
    db_dir = os.path.dirname(DB_PATH)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)
    conn = sqlite3.connect(DB_PATH, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    try:
        with conn:
            yield conn
    finally:
        conn.close()

def init_db():
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            name TEXT,
            email TEXT NOT NULL UNIQUE,
            password TEXT,
            role TEXT NOT NULL DEFAULT 'USER',
            reset_token TEXT,
            reset_token_expiry TEXT,
            created_at TEXT NOT NULL
        )
        """)
        cursor.execute("""
        CREATE TABLE IF NOT EXISTS sessions (
            token_hash TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            expires_at TEXT NOT NULL,
            FOREIGN KEY (user_id) REFERENCES users(id)
        )
        """)
        cursor.execute("""
        CREATE TABLE IF NOT EXISTS image_cache (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            filename TEXT,
            url TEXT,
            timestamp TEXT NOT NULL
        )
        """)
        cursor.execute("""
        CREATE TABLE IF NOT EXISTS log_file_cache (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            filename TEXT,
            url TEXT,
            timestamp TEXT NOT NULL
        )
        """)
        cursor.execute("""
        CREATE TABLE IF NOT EXISTS arduino_log_cache (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            gyro_x REAL,
            gyro_y REAL,
            gyro_z REAL,
            servo_neck REAL,
            servo_head REAL,
            dist_front REAL,
            dist_left REAL,
            dist_right REAL,
            motor_state TEXT,
            timestamp TEXT,
            created_at TEXT NOT NULL
        )
        """)
        cursor.execute("""
        CREATE TABLE IF NOT EXISTS pi_system_cache (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            cpu TEXT,
            ram TEXT,
            cpu_temp TEXT,
            gpu_temp TEXT,
            upload_speed TEXT,
            download_speed TEXT,
            timestamp TEXT,
            created_at TEXT NOT NULL
        )
        """)
        cursor.execute("""
        CREATE TABLE IF NOT EXISTS gps_track_cache (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            points TEXT NOT NULL,
            timestamp TEXT NOT NULL
        )
        """)
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_users_role ON users(role)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_users_reset_token ON users(reset_token)")

# Telemetry cache tables

def _prune(cursor, table: str, keep: int):
    order_column = CACHE_TABLES[table]
    cursor.execute(f"""
    DELETE FROM {table} WHERE id NOT IN (
        SELECT id FROM {table} ORDER BY {order_column} DESC, id DESC LIMIT ?
    )
    """, (keep,))

def _latest(table: str, limit: int = 1) -> List[dict]:
    order_column = CACHE_TABLES[table]
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(
            f"SELECT * FROM {table} ORDER BY {order_column} DESC, id DESC LIMIT ?",
            (limit,)
        )
        rows = cursor.fetchall()
    return [dict(row) for row in rows]

def cache_image(filename: str, url: str, keep: int):
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "INSERT INTO image_cache (filename, url, timestamp) VALUES (?, ?, ?)",
            (filename, url, now_iso())
        )
        _prune(cursor, "image_cache", keep)

def latest_image() -> Optional[dict]:
    rows = _latest("image_cache")
    return rows[0] if rows else None

def cache_log_files(files: List[tuple], keep: int):
    timestamp = now_iso()
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.executemany(
            "INSERT INTO log_file_cache (filename, url, timestamp) VALUES (?, ?, ?)",
            [(filename, url, timestamp) for filename, url in files]
        )
        _prune(cursor, "log_file_cache", keep)

def cached_log_files(limit: int = 20) -> List[dict]:
    return _latest("log_file_cache", limit)

def cache_arduino_reading(reading: ArduinoReading, keep: int):
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("""
        INSERT INTO arduino_log_cache (gyro_x, gyro_y, gyro_z, servo_neck, servo_head,
                                       dist_front, dist_left, dist_right, motor_state,
                                       timestamp, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            reading.gyro.x, reading.gyro.y, reading.gyro.z,
            reading.servo.neck, reading.servo.head,
            reading.distances.front, reading.distances.left, reading.distances.right,
            reading.motor_state, reading.timestamp, now_iso()
        ))
        _prune(cursor, "arduino_log_cache", keep)

def latest_arduino_reading() -> Optional[dict]:
    rows = _latest("arduino_log_cache")
    return rows[0] if rows else None

def cache_pi_system(reading: PiSystemReading, keep: int):
    created_at = now_iso()
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("""
        INSERT INTO pi_system_cache (cpu, ram, cpu_temp, gpu_temp, upload_speed,
                                     download_speed, timestamp, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            reading.cpu, reading.ram, reading.cpu_temp, reading.gpu_temp,
            reading.upload_speed, reading.download_speed,
            reading.timestamp or created_at, created_at
        ))
        _prune(cursor, "pi_system_cache", keep)

def latest_pi_system() -> Optional[dict]:
    rows = _latest("pi_system_cache")
    return rows[0] if rows else None

def cache_gps_track(points: List[dict], keep: int):
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "INSERT INTO gps_track_cache (points, timestamp) VALUES (?, ?)",
            (json.dumps(points), now_iso())
        )
        _prune(cursor, "gps_track_cache", keep)

def latest_gps_track() -> Optional[dict]:
    rows = _latest("gps_track_cache")
    if not rows:
        return None
    row = rows[0]
    row["points"] = json.loads(row["points"])
    return row

def get_metrics_summary():
    summary = {"caches": {}, "users": {}}
    with get_connection() as conn:
        cursor = conn.cursor()
        for table, order_column in CACHE_TABLES.items():
            cursor.execute(f"SELECT COUNT(*), MAX({order_column}) FROM {table}")
            count, latest = cursor.fetchone()
            summary["caches"][table] = {"rows": count, "latest_timestamp": latest}
        cursor.execute("SELECT role, COUNT(*) FROM users GROUP BY role")
        for role, count in cursor.fetchall():
            summary["users"][role] = count
    return summary

# Users and sessions

def create_user(
    email: str,
    name: Optional[str],
    password_hash: str,
    role: str = "USER",
    reset_token: Optional[str] = None,
    reset_token_expiry: Optional[str] = None
) -> dict:
    user_id = uuid.uuid4().hex
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("""
        INSERT INTO users (id, name, email, password, role, reset_token, reset_token_expiry, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """, (user_id, name, email, password_hash, role, reset_token, reset_token_expiry, now_iso()))
    return get_user_by_id(user_id)

def get_user_by_id(user_id: str) -> Optional[dict]:
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM users WHERE id = ?", (user_id,))
        row = cursor.fetchone()
    return dict(row) if row else None

def get_user_by_email(email: str) -> Optional[dict]:
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM users WHERE email = ?", (email,))
        row = cursor.fetchone()
    return dict(row) if row else None

def get_user_by_reset_token(token: str) -> Optional[dict]:
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM users WHERE reset_token = ?", (token,))
        row = cursor.fetchone()
    return dict(row) if row else None

def list_users_by_role(role: str) -> List[dict]:
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "SELECT * FROM users WHERE role = ? ORDER BY created_at DESC",
            (role,)
        )
        rows = cursor.fetchall()
    return [dict(row) for row in rows]

def count_users_by_role(role: str) -> int:
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT COUNT(*) FROM users WHERE role = ?", (role,))
        return cursor.fetchone()[0]

def set_user_role(user_id: str, role: str) -> Optional[dict]:
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("UPDATE users SET role = ? WHERE id = ?", (role, user_id))
    return get_user_by_id(user_id)

def set_reset_token(user_id: str, token: str, expiry: str):
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "UPDATE users SET reset_token = ?, reset_token_expiry = ? WHERE id = ?",
            (token, expiry, user_id)
        )

def update_password(user_id: str, password_hash: str):
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("""
        UPDATE users SET password = ?, reset_token = NULL, reset_token_expiry = NULL
        WHERE id = ?
        """, (password_hash, user_id))

def create_session(token_hash: str, user_id: str, expires_at: str):
    with get_connection() as conn:
        cursor = conn.cursor()
        # Expiries share one ISO format, so text order is time order
        cursor.execute("DELETE FROM sessions WHERE expires_at <= ?", (now_iso(),))
        cursor.execute(
            "INSERT INTO sessions (token_hash, user_id, expires_at) VALUES (?, ?, ?)",
            (token_hash, user_id, expires_at)
        )

def get_session_user(token_hash: str) -> Optional[dict]:
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("""
        SELECT users.*, sessions.expires_at AS session_expires_at
        FROM sessions JOIN users ON users.id = sessions.user_id
        WHERE sessions.token_hash = ?
        """, (token_hash,))
        row = cursor.fetchone()
    return dict(row) if row else None

def delete_session(token_hash: str):
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("DELETE FROM sessions WHERE token_hash = ?", (token_hash,))
