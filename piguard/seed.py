"""Create the initial admin account.

    python -m piguard.seed --email admin@example.com --password secret

Email and password default to PIGUARD_ADMIN_EMAIL / PIGUARD_ADMIN_PASSWORD.
An existing account keeps its password and is only promoted.
"""
import argparse
import os
import sys

from piguard.auth import hash_password
from piguard.database import create_user, get_user_by_email, init_db, set_user_role
from piguard.logger import logger

def seed_admin(email: str, password: str, name: str = "Admin") -> dict:
    init_db()
    user = get_user_by_email(email)
    if user is None:
        user = create_user(email=email, name=name, password_hash=hash_password(password), role="ADMIN")
        logger.info(f"Seeded admin {email}")
        return user
    if user["role"] != "ADMIN":
        user = set_user_role(user["id"], "ADMIN")
        logger.info(f"Promoted existing user {email} to admin")
    return user

def main(argv=None):
    parser = argparse.ArgumentParser(description="Seed the Pi Guard admin account")
    parser.add_argument("--email", default=os.getenv("PIGUARD_ADMIN_EMAIL", "admin@example.com"))
    parser.add_argument("--password", default=os.getenv("PIGUARD_ADMIN_PASSWORD"))
    parser.add_argument("--name", default="Admin")
    args = parser.parse_args(argv)

    if not args.password:
        parser.error("a password is required (--password or PIGUARD_ADMIN_PASSWORD)")

    user = seed_admin(args.email, args.password, args.name)
    print(f"Admin account ready: {user['email']} ({user['role']})")
    return 0

if __name__ == "__main__":
    sys.exit(main())
