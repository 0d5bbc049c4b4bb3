"""Cache-through routes for the robot telemetry feeds.

Each route tries the robot API first. A good answer is written to the matching
cache table (pruned to its newest rows) and returned with ``isFromCache:
false``. When the robot cannot be reached the newest cached row is served
instead, marked with ``isFromCache``/``lastUpdated`` and the ``X-Data-Source``
and ``X-Cache-Date`` headers. With nothing cached each route answers with its
own fixed placeholder or error payload.
"""
import random
import sqlite3
from typing import Optional
from urllib.parse import urlparse

import httpx
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from piguard.config import (
    CACHE_KEEP_ARDUINO,
    CACHE_KEEP_GPS,
    CACHE_KEEP_IMAGES,
    CACHE_KEEP_LOG_FILES,
    CACHE_KEEP_PI_SYSTEM,
    ROBOT_API_BASE_URL,
)
from piguard.database import (
    cache_arduino_reading,
    cache_gps_track,
    cache_image,
    cache_log_files,
    cache_pi_system,
    cached_log_files,
    latest_arduino_reading,
    latest_gps_track,
    latest_image,
    latest_pi_system,
    now_iso,
)
from piguard.dummy import RECORDED_GPS_TRACK, generate_gps_path
from piguard.log_entries import leading_integer, leading_number, parse_log_file
from piguard.logger import logger, log_timing
from piguard.models import ArduinoReading, LogFileRequest, PiSystemReading, RobotFile
from piguard.pubsub import publish_telemetry_event
from piguard.robot_client import RobotAPIError, fetch_json, robot_url

router = APIRouter(prefix="/api/robot-db")

FETCH_ERRORS = (httpx.HTTPError, RobotAPIError, ValidationError)
PLACEHOLDER_IMAGE = "/placeholder-camera.jpg"
UNREACHABLE_MESSAGE = "Robot API is unreachable and no cached data is available. Please check your connection."
PI_TOTAL_RAM_MB = 8192

def _cache_headers(cached_at: str) -> dict:
    return {"X-Data-Source": "cache", "X-Cache-Date": cached_at}

def _persist(label: str, write, *args) -> bool:
    try:
        write(*args)
    except sqlite3.Error as e:
        logger.warning(f"Failed to cache {label} data: {str(e)}")
        return False
    return True

async def _fetch_files(path: str, label: str):
    payload = await fetch_json(robot_url(path))
    if not isinstance(payload, list) or not payload:
        raise RobotAPIError(f"No {label} available from the API")
    return [RobotFile.model_validate(item) for item in payload]

def _is_coordinate(value) -> bool:
    if isinstance(value, bool) or value is None:
        return False
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    return number == number and number != 0

def _change(current: str, previous: str) -> str:
    now_value = leading_number(current)
    then_value = leading_number(previous)
    if now_value is None or then_value is None:
        return "0.0"
    text = f"{now_value - then_value:.1f}"
    return f"+{text}" if float(text) > 0 else text

def _robot_host() -> Optional[str]:
    return urlparse(ROBOT_API_BASE_URL).hostname

def _pi_system_payload(cpu, ram, cpu_temp, gpu_temp, upload, download, timestamp, live: bool) -> dict:
    ram_used = leading_integer(ram)
    return {
        "cpu": cpu,
        "ram": ram,
        "temperature": cpu_temp,
        "gpu_temp": gpu_temp,
        "upload_speed": upload,
        "download_speed": download,
        "timestamp": timestamp,
        "cpu_details": {
            "usage": leading_number(cpu),
            "cores": 4,
            "processes": random.randint(100, 149),
            "updated": timestamp,
        },
        "ram_details": {
            "used": ram_used,
            "total": PI_TOTAL_RAM_MB,
            "free": PI_TOTAL_RAM_MB - ram_used if ram_used is not None else None,
            "updated": timestamp,
        },
        "network": {
            "ip": _robot_host(),
            "signal_strength": "Excellent" if live else "Unknown",
            "status": "Connected" if live else "Offline",
            "updated": timestamp,
        },
        "warnings": "0",
        "uptime": "2d 3h 45m" if live else "Unknown",
        "camera": "connected" if live else "disconnected",
        "disk_usage": {
            "used": "2.8 GB",
            "total": "16 GB",
        },
    }

# Camera

@router.get("/camera")
@log_timing("robot_db_camera")
async def get_camera_image():
    try:
        images = await _fetch_files("/images", "images")
    except FETCH_ERRORS as e:
        logger.error(f"Error fetching camera image from API: {str(e)}")
        return _cached_camera_response(e)

    latest = images[0]
    image_url = robot_url(latest.url)
    _persist("image", cache_image, latest.filename, image_url, CACHE_KEEP_IMAGES)
    publish_telemetry_event("camera", {"filename": latest.filename, "image_url": image_url})

    return {
        "image_url": image_url,
        "filename": latest.filename,
        "timestamp": now_iso(),
        "isFromCache": False
    }

def _cached_camera_response(error: Exception):
    try:
        cached = latest_image()
    except sqlite3.Error as e:
        logger.error(f"Error fetching cached image data: {str(e)}")
        return JSONResponse({
            "error": "Failed to fetch camera image",
            "details": str(error),
            "status": 500,
            "image_url": PLACEHOLDER_IMAGE
        })

    if cached is None:
        return JSONResponse({
            "image_url": PLACEHOLDER_IMAGE,
            "filename": "placeholder.jpg",
            "timestamp": now_iso(),
            "error": "Camera image not available and no cached image found",
            "status": 503
        })

    return JSONResponse({
        "image_url": cached["url"],
        "filename": cached["filename"],
        "timestamp": cached["timestamp"],
        "isFromCache": True,
        "lastUpdated": cached["timestamp"]
    }, headers=_cache_headers(cached["timestamp"]))

# GPS

@router.get("/gps")
@log_timing("robot_db_gps")
async def get_gps_track(dummy: bool = False):
    if dummy:
        return JSONResponse(RECORDED_GPS_TRACK, headers={"X-Data-Source": "dummy"})

    try:
        payload = await fetch_json(robot_url("/gps"))
        if not isinstance(payload, list) or not payload:
            raise RobotAPIError("No GPS data available from the API")
        points = [
            point for point in payload
            if isinstance(point, dict)
            and _is_coordinate(point.get("latitude"))
            and _is_coordinate(point.get("longitude"))
        ]
        if not points:
            raise RobotAPIError("No valid GPS coordinates in the data")
    except FETCH_ERRORS as e:
        logger.error(f"Error fetching GPS data: {str(e)}")
        return _cached_gps_response(e)

    _persist("GPS", cache_gps_track, points, CACHE_KEEP_GPS)
    publish_telemetry_event("gps", {"points": len(points)})
    return points

def _cached_gps_response(error: Exception):
    try:
        cached = latest_gps_track()
    except sqlite3.Error as e:
        logger.error(f"Error fetching cached GPS data: {str(e)}")
        cached = None

    if cached is not None:
        return JSONResponse(cached["points"], headers=_cache_headers(cached["timestamp"]))

    return JSONResponse(generate_gps_path(20), headers={
        "X-Data-Source": "fallback",
        "X-Error": str(error)
    })

# Arduino sensors

@router.get("/sensors")
@log_timing("robot_db_sensors")
async def get_sensor_data():
    try:
        reading = ArduinoReading.model_validate(
            await fetch_json(robot_url("/log/Arduino_Latest.json"))
        )
    except FETCH_ERRORS as e:
        logger.error(f"Error fetching Arduino data from API: {str(e)}")
        return _cached_sensor_response(e)

    _persist("Arduino", cache_arduino_reading, reading, CACHE_KEEP_ARDUINO)
    publish_telemetry_event("sensors", {"timestamp": reading.timestamp})

    return {
        "gyro": {"x": reading.gyro.x, "y": reading.gyro.y, "z": reading.gyro.z},
        "servo": {"neck": reading.servo.neck, "head": reading.servo.head},
        "distances": {
            "front": reading.distances.front,
            "left": reading.distances.left,
            "right": reading.distances.right
        },
        "motorState": reading.motor_state,
        "timestamp": reading.timestamp,
        "isFromCache": False
    }

def _cached_sensor_response(error: Exception):
    try:
        cached = latest_arduino_reading()
    except sqlite3.Error as e:
        logger.error(f"Error fetching cached Arduino data: {str(e)}")
        return JSONResponse({
            "error": "Failed to fetch Arduino data",
            "details": str(error),
            "status": 500
        }, status_code=500)

    if cached is None:
        return JSONResponse({
            "error": "Arduino data not available and no cached data found",
            "status": 503
        }, status_code=503)

    return JSONResponse({
        "gyro": {"x": cached["gyro_x"], "y": cached["gyro_y"], "z": cached["gyro_z"]},
        "servo": {"neck": cached["servo_neck"], "head": cached["servo_head"]},
        "distances": {
            "front": cached["dist_front"],
            "left": cached["dist_left"],
            "right": cached["dist_right"]
        },
        "motorState": cached["motor_state"],
        "timestamp": cached["timestamp"],
        "isFromCache": True,
        "lastUpdated": cached["created_at"]
    }, headers=_cache_headers(cached["created_at"]))

# Pi system status

@router.get("/status")
@log_timing("robot_db_status")
async def get_system_status():
    try:
        reading = PiSystemReading.model_validate(
            await fetch_json(robot_url("/log/Pi5_Latest.json"))
        )
    except FETCH_ERRORS as e:
        logger.error(f"Error fetching Pi system data from API: {str(e)}")
        return _cached_status_response(e)

    try:
        previous = latest_pi_system()
    except sqlite3.Error as e:
        logger.warning(f"Could not read previous Pi system data: {str(e)}")
        previous = None

    _persist("Pi system", cache_pi_system, reading, CACHE_KEEP_PI_SYSTEM)
    publish_telemetry_event("status", {"cpu": reading.cpu, "ram": reading.ram})

    timestamp = reading.timestamp or now_iso()
    payload = _pi_system_payload(
        reading.cpu, reading.ram, reading.cpu_temp, reading.gpu_temp,
        reading.upload_speed, reading.download_speed, timestamp, live=True
    )
    payload.update({
        "cpu_change": _change(reading.cpu, previous["cpu"]) if previous else "0.0",
        "ram_change": _change(reading.ram, previous["ram"]) if previous else "0.0",
        "temp_change": _change(reading.cpu_temp, previous["cpu_temp"]) if previous else "0.0",
        "isFromCache": False
    })
    return payload

def _cached_status_response(error: Exception):
    try:
        cached = latest_pi_system()
    except sqlite3.Error as e:
        logger.error(f"Error fetching cached Pi system data: {str(e)}")
        return JSONResponse({
            "error": "Failed to fetch Pi system data",
            "details": str(error),
            "status": 500
        }, status_code=500)

    if cached is None:
        return JSONResponse({
            "error": "Pi system data not available and no cached data found",
            "message": UNREACHABLE_MESSAGE,
            "status": 503,
            "cpu": "0",
            "ram": "0",
            "temperature": "0",
            "gpu_temp": "0",
            "camera": "disconnected",
            "warnings": "N/A",
            "uptime": "N/A"
        }, status_code=503)

    payload = _pi_system_payload(
        cached["cpu"], cached["ram"], cached["cpu_temp"], cached["gpu_temp"],
        cached["upload_speed"], cached["download_speed"], cached["timestamp"], live=False
    )
    payload.update({
        "cpu_change": "0.0",
        "ram_change": "0.0",
        "temp_change": "0.0",
        "isFromCache": True,
        "lastUpdated": cached["created_at"]
    })
    return JSONResponse(payload, headers=_cache_headers(cached["created_at"]))

# Log files

@router.get("/logs")
@log_timing("robot_db_logs")
async def list_log_files():
    try:
        files = await _fetch_files("/logs", "logs")
    except FETCH_ERRORS as e:
        logger.error(f"Error fetching logs from API: {str(e)}")
        return _cached_logs_response(e)

    entries = [(log.filename, robot_url(log.url)) for log in files]
    _persist("log files", cache_log_files, entries, CACHE_KEEP_LOG_FILES)
    publish_telemetry_event("logs", {"files": len(entries)})

    timestamp = now_iso()
    return {
        "logs": [
            {"filename": filename, "url": url, "timestamp": timestamp}
            for filename, url in entries
        ],
        "isFromCache": False
    }

def _cached_logs_response(error: Exception):
    try:
        cached = cached_log_files(limit=20)
    except sqlite3.Error as e:
        logger.error(f"Error fetching cached log files data: {str(e)}")
        return JSONResponse({
            "error": "Failed to fetch log files",
            "details": str(error),
            "status": 500
        }, status_code=500)

    if not cached:
        return JSONResponse({
            "error": "Log files not available and no cached data found",
            "message": UNREACHABLE_MESSAGE,
            "status": 503
        }, status_code=503)

    return JSONResponse({
        "logs": [
            {"filename": row["filename"], "url": row["url"], "timestamp": row["timestamp"]}
            for row in cached
        ],
        "isFromCache": True,
        "lastUpdated": cached[0]["timestamp"]
    }, headers=_cache_headers(cached[0]["timestamp"]))

@router.post("/logs")
@log_timing("robot_db_log_file")
async def get_log_file(body: LogFileRequest):
    if not body.logUrl:
        return JSONResponse({"error": "Log URL is required"}, status_code=400)

    url = robot_url(body.logUrl)
    if not url.startswith(ROBOT_API_BASE_URL + "/"):
        return JSONResponse({"error": "Log URL must point to the robot API"}, status_code=400)

    try:
        content = await fetch_json(url)
    except (httpx.HTTPError, RobotAPIError) as e:
        logger.error(f"Error fetching specific log file: {str(e)}")
        return JSONResponse({
            "error": "Failed to fetch log file content",
            "details": str(e),
            "status": 500
        }, status_code=500)

    filename = urlparse(url).path.rsplit("/", 1)[-1]
    return {
        "log": content,
        "entries": [entry.model_dump() for entry in parse_log_file(content, filename)]
    }
