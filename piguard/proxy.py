"""Pass-through to the configured Raspberry Pi with dummy data as fallback."""
import traceback
from typing import Optional

import httpx
from fastapi import APIRouter, Cookie
from fastapi.responses import JSONResponse

from piguard.config import DEFAULT_PI_PORT, PROXY_TIMEOUT
from piguard.dummy import generate_dummy_data
from piguard.logger import logger
from piguard.robot_client import RobotAPIError, fetch_json
from piguard.settings import is_demo_mode

router = APIRouter(prefix="/api")

def _dummy_response(endpoint: str, sensor_type: Optional[str]):
    data = generate_dummy_data(endpoint, sensor_type or "temperature")
    if data is None:
        return JSONResponse({"error": f"Unknown endpoint: {endpoint}"}, status_code=400)
    return JSONResponse(data)

@router.get("/proxy")
async def proxy(
    endpoint: Optional[str] = None,
    dummy: Optional[str] = None,
    type: Optional[str] = None,
    raspberry_pi_ip: Optional[str] = Cookie(None),
    raspberry_pi_port: Optional[str] = Cookie(None),
    demo_mode: Optional[str] = Cookie(None)
):
    if not endpoint:
        return JSONResponse({"error": "Endpoint parameter required"}, status_code=400)

    try:
        if dummy == "true" or is_demo_mode(demo_mode):
            return _dummy_response(endpoint, type)

        if not raspberry_pi_ip:
            logger.info("No Raspberry Pi IP configured, falling back to dummy data")
            return _dummy_response(endpoint, type)

        api_url = f"http://{raspberry_pi_ip}:{raspberry_pi_port or DEFAULT_PI_PORT}/{endpoint.lstrip('/')}"
        try:
            logger.info(f"Proxying request to {api_url}")
            return JSONResponse(await fetch_json(api_url, timeout=PROXY_TIMEOUT))
        except (httpx.HTTPError, httpx.InvalidURL, RobotAPIError) as e:
            logger.error(f"Error proxying request to {api_url}: {str(e)}")
            logger.info("Falling back to dummy data after connection error")
            return _dummy_response(endpoint, type)
    except Exception:
        logger.error(f"Proxy error:\n{traceback.format_exc()}")
        return JSONResponse({"error": "Proxy error"}, status_code=500)
