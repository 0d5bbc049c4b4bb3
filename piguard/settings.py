"""Per-browser settings kept in httpOnly cookies."""
import re
from typing import Optional

from fastapi import APIRouter, Cookie, Response
from fastapi.responses import JSONResponse

from piguard.config import DEFAULT_PI_PORT, SETTINGS_COOKIE_MAX_AGE
from piguard.logger import logger
from piguard.models import DemoModeSettings, RaspberryPiSettings

router = APIRouter(prefix="/api/settings")

IP_PATTERN = re.compile(r"(\d{1,3}\.){3}\d{1,3}")

def _set_setting(response: Response, name: str, value: str):
    response.set_cookie(
        name,
        value,
        path="/",
        max_age=SETTINGS_COOKIE_MAX_AGE,
        httponly=True,
    )

def is_demo_mode(demo_mode: Optional[str]) -> bool:
    return demo_mode == "true"

def _valid_port(port) -> bool:
    if port is None or port == "" or isinstance(port, bool):
        return False
    try:
        number = float(port)
    except (TypeError, ValueError):
        return False
    return 1 <= number <= 65535

@router.get("/raspberry-pi")
def get_raspberry_pi_settings(
    raspberry_pi_ip: Optional[str] = Cookie(None),
    raspberry_pi_port: Optional[str] = Cookie(None)
):
    return {
        "ip": raspberry_pi_ip or "",
        "port": raspberry_pi_port or DEFAULT_PI_PORT
    }

@router.post("/raspberry-pi")
def save_raspberry_pi_settings(settings: RaspberryPiSettings, response: Response):
    if settings.ip and not IP_PATTERN.fullmatch(settings.ip):
        return JSONResponse({"error": "Invalid IP address format"}, status_code=400)

    if not _valid_port(settings.port):
        return JSONResponse({"error": "Invalid port number"}, status_code=400)

    _set_setting(response, "raspberry_pi_ip", settings.ip or "")
    _set_setting(response, "raspberry_pi_port", str(settings.port))
    logger.info(f"Raspberry Pi endpoint set to {settings.ip or '<none>'}:{settings.port}")
    return {"success": True}

@router.get("/demo-mode")
def get_demo_mode(demo_mode: Optional[str] = Cookie(None)):
    return {"enabled": is_demo_mode(demo_mode)}

@router.post("/demo-mode")
def save_demo_mode(settings: DemoModeSettings, response: Response):
    if not isinstance(settings.enabled, bool):
        return JSONResponse({"error": "Enabled must be a boolean"}, status_code=400)

    _set_setting(response, "demo_mode", "true" if settings.enabled else "false")
    logger.info(f"Demo mode {'enabled' if settings.enabled else 'disabled'}")
    return {"success": True, "enabled": settings.enabled}
