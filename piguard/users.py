import secrets
import sqlite3
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from piguard.auth import (
    current_user,
    expiry_in,
    generate_reset_token,
    hash_password,
    hash_token,
    is_expired,
    public_user,
    require_admin,
    verify_password,
)
from piguard.config import EXPOSE_RESET_TOKEN
from piguard.database import (
    count_users_by_role,
    create_user,
    get_user_by_email,
    get_user_by_id,
    get_user_by_reset_token,
    list_users_by_role,
    set_reset_token,
    set_user_role,
    update_password,
)
from piguard.logger import logger
from piguard.models import AdminGrant, Approval, Credentials, Registration, ResetConfirm, ResetRequest

router = APIRouter(prefix="/api/users")

INVITE_TOKEN_TTL = 24 * 3600
RESET_TOKEN_TTL = 3600
RESET_MESSAGE = "If your email is registered, you will receive a reset link"

def _summary(user: dict) -> dict:
    return {
        "id": user["id"],
        "name": user["name"],
        "email": user["email"],
        "createdAt": user["created_at"]
    }

def _reset_url(token: str) -> str:
    return f"/auth/reset-password?token={token}"

def _required_user(user_id: Optional[str]) -> dict:
    if not user_id:
        raise HTTPException(status_code=400, detail="User ID is required")
    user = get_user_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user

@router.post("/register", status_code=201)
def register(registration: Registration):
    if not registration.email or not registration.password:
        raise HTTPException(status_code=400, detail="Email and password are required")

    if get_user_by_email(registration.email) is not None:
        raise HTTPException(status_code=409, detail="User with this email already exists")

    try:
        user = create_user(
            email=registration.email,
            name=registration.name or registration.email.split("@")[0],
            password_hash=hash_password(registration.password),
        )
    except sqlite3.IntegrityError:
        raise HTTPException(status_code=409, detail="User with this email already exists")

    logger.info(f"Registered {user['email']}, waiting for approval")
    return {"success": True, "user": public_user(user)}

# Admins

@router.get("/admin")
def list_admins(admin: dict = Depends(require_admin)):
    return [_summary(user) for user in list_users_by_role("ADMIN")]

@router.post("/admin")
def grant_admin(grant: AdminGrant, admin: dict = Depends(require_admin)):
    if not grant.email:
        raise HTTPException(status_code=400, detail="Email is required")

    user = get_user_by_email(grant.email)
    reset_token = None
    if user is None:
        reset_token = generate_reset_token()
        user = create_user(
            email=grant.email,
            name=grant.name or grant.email.split("@")[0],
            password_hash=hash_password(secrets.token_hex(10)),
            reset_token=hash_token(reset_token),
            reset_token_expiry=expiry_in(INVITE_TOKEN_TTL),
        )
        logger.info(f"Created new user {grant.email} with a password reset invite")

    updated = set_user_role(user["id"], "ADMIN")
    logger.info(f"{admin['email']} granted admin to {updated['email']}")

    result = {**public_user(updated), "isNewUser": reset_token is not None}
    if reset_token is not None:
        result["resetToken"] = reset_token
        result["resetUrl"] = _reset_url(reset_token)
    return result

@router.delete("/admin")
def revoke_admin(id: Optional[str] = None, admin: dict = Depends(require_admin)):
    user = _required_user(id)
    if user["role"] != "ADMIN":
        raise HTTPException(status_code=400, detail="This user is not an admin")
    if count_users_by_role("ADMIN") <= 1:
        raise HTTPException(status_code=400, detail="Cannot remove the last admin user")

    updated = set_user_role(user["id"], "USER")
    logger.info(f"{admin['email']} removed admin from {updated['email']}")
    return public_user(updated)

# Approval queue

@router.get("/pending")
def list_pending(admin: dict = Depends(require_admin)):
    return [_summary(user) for user in list_users_by_role("USER")]

@router.post("/pending")
def approve_user(approval: Approval, admin: dict = Depends(require_admin)):
    user = _required_user(approval.userId)
    if user["role"] != "USER":
        raise HTTPException(status_code=400, detail="This user is not pending approval")

    reset_token = generate_reset_token()
    set_reset_token(user["id"], hash_token(reset_token), expiry_in(INVITE_TOKEN_TTL))
    updated = set_user_role(user["id"], "APPROVED")
    logger.info(f"{admin['email']} approved {updated['email']}")

    return {
        **public_user(updated),
        "resetToken": reset_token,
        "resetUrl": _reset_url(reset_token)
    }

@router.get("/approved")
def list_approved(admin: dict = Depends(require_admin)):
    return [_summary(user) for user in list_users_by_role("APPROVED")]

@router.delete("/approved")
def revoke_access(id: Optional[str] = None, admin: dict = Depends(require_admin)):
    user = _required_user(id)
    if user["role"] != "APPROVED":
        raise HTTPException(status_code=400, detail="This user is not an approved user")

    updated = set_user_role(user["id"], "USER")
    logger.info(f"{admin['email']} revoked access for {updated['email']}")
    return {
        "success": True,
        "message": "User access has been revoked",
        "user": public_user(updated)
    }

@router.post("/first-admin")
def create_first_admin(credentials: Credentials, caller: Optional[dict] = Depends(current_user)):
    """Promote a user to admin while the system has none.

    The caller proves who they are with a session or with the password of the
    account being promoted.
    """
    if caller is None and not credentials.password:
        raise HTTPException(status_code=401, detail="Authentication required")

    if count_users_by_role("ADMIN") > 0:
        raise HTTPException(
            status_code=403,
            detail="Admin user already exists. Contact an administrator to grant admin privileges."
        )

    if not credentials.email:
        raise HTTPException(status_code=400, detail="Email is required")

    user = get_user_by_email(credentials.email)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")

    if caller is None and not verify_password(credentials.password, user["password"]):
        raise HTTPException(status_code=401, detail="Authentication required")

    updated = set_user_role(user["id"], "ADMIN")
    logger.info(f"First admin set to {updated['email']}")
    return {
        "success": True,
        "message": "First admin user created successfully",
        "user": public_user(updated)
    }

# Password reset

@router.post("/reset-password")
def request_password_reset(reset: ResetRequest):
    if not reset.email:
        raise HTTPException(status_code=400, detail="Email is required")

    user = get_user_by_email(reset.email)
    if user is None:
        return {"success": True, "message": RESET_MESSAGE}

    token = generate_reset_token()
    set_reset_token(user["id"], hash_token(token), expiry_in(RESET_TOKEN_TTL))
    logger.info(f"Reset token issued for {reset.email}")

    result = {"success": True, "message": RESET_MESSAGE}
    # No mail transport; development setups can hand the token back instead
    if EXPOSE_RESET_TOKEN:
        result["token"] = token
    return result

@router.put("/reset-password")
def reset_password(confirm: ResetConfirm):
    if not confirm.token or not confirm.password:
        raise HTTPException(status_code=400, detail="Token and password are required")

    user = get_user_by_reset_token(hash_token(confirm.token))
    if user is None or is_expired(user["reset_token_expiry"]):
        raise HTTPException(status_code=400, detail="Invalid or expired token")

    update_password(user["id"], hash_password(confirm.password))
    logger.info(f"Password reset for {user['email']}")
    return {"success": True, "message": "Password has been reset successfully"}
