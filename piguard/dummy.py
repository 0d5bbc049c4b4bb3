"""Synthetic telemetry for demo mode and for when the robot is unreachable."""
import math
import random
import time
from datetime import datetime, timedelta
from typing import List, Optional

from piguard.database import now_iso

BASE_LAT = 41.015137
BASE_LNG = 28.979530

# 1x1 PNG
PLACEHOLDER_FRAME = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+P+/HgAFhQJ/zODHJgAAAABJRU5ErkJggg=="

TIME_INTERVALS = [
    "2 minutes ago",
    "3 minutes ago",
    "5 minutes ago",
    "7 minutes ago",
    "10 minutes ago",
    "just now",
    "1 minute ago",
]

# Headings cycled every three points by generate_gps_path
MOVEMENT_PATTERNS = [
    (0.0002, 0.0001),    # NE
    (0.0001, 0.0003),    # E
    (-0.0001, 0.0002),   # SE
    (-0.0002, 0.0),      # S
    (-0.0001, -0.0002),  # SW
    (0.0001, -0.0002),   # W
    (0.0003, 0.0),       # N
]

SENSOR_RANGES = {
    "temperature": (20, 15, "°C"),
    "humidity": (40, 40, "%"),
    "distance": (0, 100, "cm"),
    "voltage": (3.3, 1.7, "V"),
}

# Indoor recording from the robot's GPS module
RECORDED_GPS_TRACK = [
    {"time": "17.03.2025_18:57:13", "latitude": 41.013645833333335, "longitude": 28.831767666666668, "altitude": 70.1},
    {"time": "17.03.2025_18:57:14", "latitude": 41.01364516666667, "longitude": 28.8317735, "altitude": 70.5},
    {"time": "17.03.2025_18:57:15", "latitude": 41.01364516666667, "longitude": 28.831776, "altitude": 70.6},
    {"time": "17.03.2025_18:57:16", "latitude": 41.013645833333335, "longitude": 28.831773833333333, "altitude": 70.1},
    {"time": "17.03.2025_18:57:17", "latitude": 41.01364616666667, "longitude": 28.831772, "altitude": 69.8},
    {"time": "17.03.2025_18:57:18", "latitude": 41.013646, "longitude": 28.831774333333332, "altitude": 69.8},
    {"time": "17.03.2025_18:57:19", "latitude": 41.013646, "longitude": 28.8317755, "altitude": 69.7},
    {"time": "17.03.2025_18:57:20", "latitude": 41.013646333333334, "longitude": 28.831776166666668, "altitude": 69.7},
    {"time": "17.03.2025_18:57:21", "latitude": 41.0136465, "longitude": 28.831776666666666, "altitude": 69.6},
    {"time": "17.03.2025_18:57:22", "latitude": 41.013646333333334, "longitude": 28.831777833333334, "altitude": 69.4},
    {"time": "17.03.2025_18:57:23", "latitude": 41.013646666666666, "longitude": 28.831778, "altitude": 69.4},
    {"time": "17.03.2025_18:58:15", "latitude": 41.013645833333335, "longitude": 28.831755166666667, "altitude": 62.1},
    {"time": "17.03.2025_18:58:16", "latitude": 41.0136455, "longitude": 28.831758666666666, "altitude": 62.2},
    {"time": "17.03.2025_18:58:17", "latitude": 41.013645833333335, "longitude": 28.831759666666667, "altitude": 62.2},
]

def _signed(value, positive_bias=0.5) -> str:
    return ("+" if random.random() > positive_bias else "-") + str(value)

def generate_dummy_gps() -> dict:
    return {
        "id": f"gps_{int(time.time() * 1000)}",
        "latitude": BASE_LAT + (random.random() - 0.5) * 0.01,
        "longitude": BASE_LNG + (random.random() - 0.5) * 0.01,
        "altitude": 100 + random.random() * 10,
        "speed": 5 + random.random() * 20,
        "satellites": random.randint(6, 8),
        "signalStrength": 75 + random.random() * 15,
        "timestamp": now_iso(),
    }

def generate_dummy_camera() -> dict:
    return {
        "id": f"cam_{int(time.time() * 1000)}",
        "image": PLACEHOLDER_FRAME,
        "timestamp": now_iso(),
    }

def generate_dummy_status() -> dict:
    cpu_usage = random.randint(20, 59)
    ram_total = 2048
    ram_used = random.randint(200, 999)
    temperature = random.randint(35, 49)
    battery_level = random.randint(60, 99)

    return {
        "cpu": f"{cpu_usage}%",
        "cpu_change": _signed(random.randint(0, 9)) + "%",
        "cpu_details": {
            "usage": cpu_usage,
            "cores": 4,
            "processes": random.randint(10, 29),
            "updated": random.choice(TIME_INTERVALS),
        },
        "ram": f"{ram_used}MB / {ram_total}MB",
        "ram_change": _signed(random.randint(0, 49)) + "MB",
        "ram_details": {
            "total": ram_total,
            "used": ram_used,
            "free": ram_total - ram_used,
            "updated": random.choice(TIME_INTERVALS),
        },
        "temperature": f"{temperature}°C",
        "temp_change": _signed(f"{random.random() * 3:.1f}") + "°C",
        "temp_details": {
            "current": temperature,
            "max": temperature + random.randint(0, 4),
            "min": temperature - random.randint(0, 4),
            "updated": random.choice(TIME_INTERVALS),
        },
        "battery": f"{battery_level}%",
        "battery_change": _signed(random.randint(0, 4), positive_bias=0.7) + "%",
        "battery_details": {
            "level": battery_level,
            "charging": random.random() > 0.7,
            "estimated_remaining": int(battery_level / 10 * 60),
            "updated": random.choice(TIME_INTERVALS),
        },
        "timestamp": now_iso(),
        "camera": "connected" if random.random() > 0.1 else "disconnected",
        "warnings": str(random.randint(0, 2)),
        "uptime": f"{random.randint(1, 24)}h {random.randint(0, 59)}m",
        "disk_usage": {
            "total": "16GB",
            "used": f"{random.randint(3, 10)}GB",
            "free": f"{random.randint(4, 7)}GB",
        },
        "network": {
            "status": "connected",
            "ip": f"192.168.1.{random.randint(0, 253)}",
            "signal_strength": f"{random.randint(60, 99)}%",
            "updated": random.choice(TIME_INTERVALS),
        },
    }

def generate_dummy_sensor(sensor_type: str) -> dict:
    low, spread, unit = SENSOR_RANGES.get(sensor_type, (0, 100, "units"))
    return {
        "id": f"sensor_{int(time.time() * 1000)}",
        "sensor_type": sensor_type,
        "value": round(low + random.random() * spread, 2),
        "unit": unit,
        "timestamp": now_iso(),
    }

def generate_dummy_data(endpoint: str, sensor_type: str = "temperature") -> Optional[dict]:
    """Dummy payload for a proxy endpoint, or None when the endpoint is unknown."""
    if endpoint == "gps":
        return generate_dummy_gps()
    if endpoint == "camera":
        return generate_dummy_camera()
    if endpoint == "status":
        return generate_dummy_status()
    if endpoint == "sensors":
        return generate_dummy_sensor(sensor_type)
    return None

def generate_gps_path(count: int = 20) -> List[dict]:
    """Smooth exploration-like path that ends at the current time, one point every 15s."""
    points = []
    lat, lng = BASE_LAT, BASE_LNG
    now = datetime.now()

    for i in range(count):
        d_lat, d_lng = MOVEMENT_PATTERNS[(i // 3) % len(MOVEMENT_PATTERNS)]
        factor = 0.6 + random.random() * 0.8
        lat += d_lat * factor + (random.random() - 0.5) * 0.00005
        lng += d_lng * factor + (random.random() - 0.5) * 0.00005

        moment = now - timedelta(seconds=(count - i) * 15)
        points.append({
            "latitude": lat,
            "longitude": lng,
            "time": moment.strftime("%H:%M:%S"),
            "altitude": 100 + math.sin(i / 5) * 5 + random.random() * 2,
            "satellites": random.randint(6, 8),
            "signalStrength": 75 + math.sin(i / 10) * 10 + random.random() * 5,
        })

    return points
