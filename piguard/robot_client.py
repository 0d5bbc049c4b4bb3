"""HTTP access to the robot-hosted API.

Every call is a single GET with a fixed timeout and no retries. Failures are
raised as :class:`RobotAPIError` (or ``httpx.HTTPError`` for transport
problems) so route handlers can fall back to cached or dummy data.
"""
import httpx

from piguard.config import ROBOT_API_BASE_URL, ROBOT_API_TIMEOUT

# Swapped for an httpx.MockTransport in tests
TRANSPORT = None

class RobotAPIError(Exception):
    pass

def robot_url(path: str, base_url: str = ROBOT_API_BASE_URL) -> str:
    if path.startswith("http://") or path.startswith("https://"):
        return path
    if not path.startswith("/"):
        path = "/" + path
    return f"{base_url}{path}"

async def fetch_json(url: str, timeout: float = ROBOT_API_TIMEOUT):
    async with httpx.AsyncClient(timeout=timeout, transport=TRANSPORT) as client:
        response = await client.get(url, headers={"Cache-Control": "no-store"})

    if not response.is_success:
        raise RobotAPIError(f"Failed to fetch from API: {response.status_code}")

    try:
        return response.json()
    except ValueError:
        raise RobotAPIError(f"Invalid JSON returned by {url}")
