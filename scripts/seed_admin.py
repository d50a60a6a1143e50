"""
Seed Admin User

Creates an admin account for the back office.
Run this script once per admin to set up the account.

Usage:
    ADMIN_EMAIL=ops@example.com ADMIN_PASSWORD=... python scripts/seed_admin.py
    python scripts/seed_admin.py --email ops@example.com --password ... --role owner
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path

# Add the src directory to the path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from academy.core.config import settings
from academy.core.security import hash_password, validate_password_strength
from academy.modules.admins.repository import AdminRepository


async def seed_admin(email: str, password: str, role: str | None) -> None:
    """Create the admin if it doesn't exist."""

    engine = create_async_engine(settings.database_url, echo=False)
    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as db:
        existing = await AdminRepository.get_by_email(db, email)

        if existing:
            print(f"Admin already exists: {existing.email}")
            print(f"  ID: {existing.id}")
            print(f"  Role: {existing.role}")
            await engine.dispose()
            return

        admin = await AdminRepository.create(
            db,
            email=email,
            password_hash=hash_password(password),
            role=role,
        )
        await db.commit()

        print("Admin created successfully!")
        print(f"  Email: {admin.email}")
        print(f"  ID: {admin.id}")
        print(f"  Role: {admin.role}")

    await engine.dispose()


def main() -> int:
    parser = argparse.ArgumentParser(description="Create an admin account")
    parser.add_argument("--email", default=os.environ.get("ADMIN_EMAIL"))
    parser.add_argument("--password", default=os.environ.get("ADMIN_PASSWORD"))
    parser.add_argument("--role", default=os.environ.get("ADMIN_ROLE"))
    args = parser.parse_args()

    if not args.email or not args.password:
        print("Both an email and a password are required (--email/--password or ADMIN_EMAIL/ADMIN_PASSWORD).")
        return 1

    problem = validate_password_strength(args.password)
    if problem:
        print(f"Password rejected: {problem}")
        return 1

    asyncio.run(seed_admin(args.email, args.password, args.role))
    return 0


if __name__ == "__main__":
    sys.exit(main())
