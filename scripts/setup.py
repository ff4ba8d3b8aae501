#!/usr/bin/env python3
"""Setup script for the Booki API: migrate the database and seed an admin account."""

import asyncio
import logging
import os
import sys
from pathlib import Path

# Add the server directory to the Python path
server_dir = Path(__file__).parent.parent / "server"
sys.path.insert(0, str(server_dir))

from alembic import command
from alembic.config import Config
from sqlalchemy import func, select

from booki.core.database import async_session_factory, close_db
from booki.core.security import hash_password
from booki.models import BlogCategory, User, UserRole

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    ("Destinations", "Places worth the trip"),
    ("Travel Tips", "Packing, budgeting and planning advice"),
    ("Culture", "Food, festivals and local traditions"),
    ("Adventure", "Hiking, diving and desert expeditions"),
]


def migrate_database() -> None:
    """Apply every Alembic migration."""
    alembic_cfg = Config(str(server_dir / "db" / "alembic.ini"))
    logger.info("Running database migrations...")
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed")


async def seed_admin(email: str, password: str) -> None:
    async with async_session_factory() as db:
        existing = await db.scalar(select(User).where(func.lower(User.email) == email.lower()))
        if existing is not None:
            logger.info(f"Admin account {email} already exists, skipping")
            return
        db.add(
            User(
                name="Administrator",
                email=email.lower(),
                password_hash=hash_password(password),
                role=UserRole.ADMIN,
                email_verified=True,
            )
        )
        await db.commit()
        logger.info(f"Admin account {email} created")


async def seed_categories() -> None:
    async with async_session_factory() as db:
        count = await db.scalar(select(func.count()).select_from(BlogCategory))
        if count:
            logger.info("Blog categories already exist, skipping")
            return
        for name, description in DEFAULT_CATEGORIES:
            db.add(BlogCategory(name=name, description=description))
        await db.commit()
        logger.info(f"Created {len(DEFAULT_CATEGORIES)} blog categories")


async def seed(email: str, password: str) -> None:
    try:
        await seed_admin(email, password)
        await seed_categories()
    finally:
        await close_db()


def main() -> None:
    email = os.environ.get("BOOKI_ADMIN_EMAIL", "admin@booki.tn")
    password = os.environ.get("BOOKI_ADMIN_PASSWORD")
    if not password:
        logger.error("Set BOOKI_ADMIN_PASSWORD to create the admin account")
        sys.exit(1)

    # Alembic's env.py runs its own event loop
    migrate_database()
    asyncio.run(seed(email, password))

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: cd server && uvicorn booki.main:app --reload")


if __name__ == "__main__":
    main()
