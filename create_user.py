#!/usr/bin/env python3
"""
Admin Panel User Utility
Creates the first admin panel account, or resets a user's password.

Usage:
  python create_user.py <username>                  - Create an admin user
  python create_user.py <username> --role manager  - Create a manager user
  python create_user.py <username> --reset          - Reset an existing user's password
"""
import argparse
import asyncio
import getpass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from affiliate_gallery.database import AsyncSessionLocal, close_db, init_db
from affiliate_gallery.models import User
from affiliate_gallery.routes.auth import MIN_PASSWORD_LENGTH
from affiliate_gallery.utils.auth import MAX_PASSWORD_BYTES, hash_password, password_too_long


def prompt_password() -> str:
    password = getpass.getpass("Enter password: ")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise SystemExit(f"❌ Error: Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if password_too_long(password):
        raise SystemExit(f"❌ Error: Password must be at most {MAX_PASSWORD_BYTES} bytes long")

    if password != getpass.getpass("Confirm password: "):
        raise SystemExit("❌ Error: Passwords do not match")
    return password


async def create_user(username: str, password: str, role: str) -> None:
    async with AsyncSessionLocal() as session:
        session.add(User(username=username, password_hash=hash_password(password), role=role))
        try:
            await session.commit()
        except IntegrityError:
            raise SystemExit(f"❌ Error: Username '{username}' already exists (use --reset)")
    print(f"\n✅ Created {role} user '{username}'")


async def reset_password(username: str, password: str) -> None:
    async with AsyncSessionLocal() as session:
        result = await session.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()
        if user is None:
            raise SystemExit(f"❌ Error: User '{username}' not found")
        user.password_hash = hash_password(password)
        await session.commit()
    print(f"\n✅ Password updated for '{username}'")


async def run(args: argparse.Namespace) -> None:
    await init_db()
    try:
        password = prompt_password()
        if args.reset:
            await reset_password(args.username, password)
        else:
            await create_user(args.username, password, args.role)
    finally:
        await close_db()


def main():
    parser = argparse.ArgumentParser(description="Manage admin panel users")
    parser.add_argument("username")
    parser.add_argument("--role", choices=("admin", "manager"), default="admin")
    parser.add_argument("--reset", action="store_true", help="Reset the password of an existing user")
    asyncio.run(run(parser.parse_args()))


if __name__ == "__main__":
    main()
