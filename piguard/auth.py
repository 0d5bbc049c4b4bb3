"""Password hashing, cookie sessions and the role guards used by the routes.

Sessions are opaque random tokens handed to the browser in an httpOnly
cookie. Only their sha256 hash is stored, next to the user id and an expiry.
Roles: ``USER`` (registered, waiting for approval), ``APPROVED`` and ``ADMIN``.
"""
import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import APIRouter, Cookie, Depends, HTTPException, Response

from piguard.config import BCRYPT_ROUNDS, SESSION_COOKIE_NAME, SESSION_MAX_AGE
from piguard.database import (
    create_session,
    delete_session,
    format_iso,
    get_session_user,
    get_user_by_email,
    parse_iso,
)
from piguard.logger import logger
from piguard.models import Credentials

router = APIRouter(prefix="/api/auth")

PENDING_MESSAGE = "Your account is not approved yet. Please wait for administrator approval."

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode()

def verify_password(password: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode(), hashed.encode())
    except ValueError:
        return False

def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()

def generate_reset_token() -> str:
    return secrets.token_hex(20)

def expiry_in(seconds: int) -> str:
    return format_iso(datetime.now(timezone.utc) + timedelta(seconds=seconds))

def is_expired(expiry: Optional[str]) -> bool:
    return not expiry or parse_iso(expiry) <= datetime.now(timezone.utc)

def public_user(user: dict) -> dict:
    return {
        "id": user["id"],
        "email": user["email"],
        "name": user["name"],
        "role": user["role"]
    }

# Dependencies

def current_user(session_token: Optional[str] = Cookie(None, alias=SESSION_COOKIE_NAME)) -> Optional[dict]:
    if not session_token:
        return None

    token_hash = hash_token(session_token)
    user = get_session_user(token_hash)
    if user is None:
        return None
    if is_expired(user["session_expires_at"]):
        delete_session(token_hash)
        return None
    return user

def require_auth(user: Optional[dict] = Depends(current_user)) -> dict:
    if user is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    if user["role"] == "USER":
        raise HTTPException(status_code=403, detail=PENDING_MESSAGE)
    return user

def require_admin(user: Optional[dict] = Depends(current_user)) -> dict:
    if user is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    if user["role"] != "ADMIN":
        raise HTTPException(status_code=403, detail="Admin privileges required")
    return user

# Routes

@router.post("/login")
def login(credentials: Credentials, response: Response):
    if not credentials.email or not credentials.password:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    user = get_user_by_email(credentials.email)
    if user is None or not verify_password(credentials.password, user["password"]):
        logger.warning(f"Failed login for {credentials.email}")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if user["role"] not in ("ADMIN", "APPROVED"):
        raise HTTPException(status_code=403, detail=PENDING_MESSAGE)

    token = secrets.token_urlsafe(32)
    create_session(hash_token(token), user["id"], expiry_in(SESSION_MAX_AGE))
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        path="/",
        max_age=SESSION_MAX_AGE,
        httponly=True,
        samesite="lax",
    )
    logger.info(f"User {user['email']} logged in")
    return public_user(user)

@router.post("/logout")
def logout(
    response: Response,
    session_token: Optional[str] = Cookie(None, alias=SESSION_COOKIE_NAME)
):
    if session_token:
        delete_session(hash_token(session_token))
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
    return {"success": True}

@router.get("/session")
def get_session(user: Optional[dict] = Depends(current_user)):
    if user is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return public_user(user)
