import os

from dotenv import load_dotenv

load_dotenv()

DB_PATH = os.getenv("PIGUARD_DB_PATH", "data/pi_guard.db")
LOG_PATH = os.getenv("PIGUARD_LOG_PATH", "logs/pi_guard.log")
REDIS_URL = os.getenv("PIGUARD_REDIS_URL", "redis://localhost:6379")

ROBOT_API_BASE_URL = os.getenv("ROBOT_API_BASE_URL", "http://10.146.42.252:8500").rstrip("/")
ROBOT_API_TIMEOUT = float(os.getenv("ROBOT_API_TIMEOUT", "5"))
PROXY_TIMEOUT = float(os.getenv("PROXY_TIMEOUT", "10"))
DEFAULT_PI_PORT = os.getenv("RASPBERRY_PI_DEFAULT_PORT", "8000")

# Rows kept per cache table
CACHE_KEEP_IMAGES = int(os.getenv("CACHE_KEEP_IMAGES", "10"))
CACHE_KEEP_LOG_FILES = int(os.getenv("CACHE_KEEP_LOG_FILES", "30"))
CACHE_KEEP_ARDUINO = int(os.getenv("CACHE_KEEP_ARDUINO", "10"))
CACHE_KEEP_PI_SYSTEM = int(os.getenv("CACHE_KEEP_PI_SYSTEM", "10"))
CACHE_KEEP_GPS = int(os.getenv("CACHE_KEEP_GPS", "10"))

SETTINGS_COOKIE_MAX_AGE = 60 * 60 * 24 * 30
SESSION_COOKIE_NAME = "piguard_session"
SESSION_MAX_AGE = int(os.getenv("SESSION_MAX_AGE", str(60 * 60 * 24 * 7)))
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))

# Development only: POST /api/users/reset-password answers with the reset token
EXPOSE_RESET_TOKEN = os.getenv("PIGUARD_EXPOSE_RESET_TOKEN", "false").lower() == "true"
