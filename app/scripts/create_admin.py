# python -m app.scripts.create_admin
import asyncio
import os

from sqlalchemy import select

from app.core.db import AsyncSessionLocal
from app.core.logging import setup_logging
from app.core.security import hash_password
from app.models.enums.user_role import UserRole
from app.models.users.user_models import User
from app.utils.logger import get_logger

logger = get_logger(__name__)


async def create_admin():
    email = os.getenv("ADMIN_EMAIL", "admin@example.com")
    password = os.getenv("ADMIN_PASSWORD")
    if not password:
        raise ValueError("ADMIN_PASSWORD is required")

    async with AsyncSessionLocal() as session:
        existing = await session.scalar(select(User).where(User.username == email))
        if existing:
            logger.info("Admin user already exists", extra={"username": email})
            return

        session.add(
            User(
                username=email,
                name="Administrator",
                password_hash=hash_password(password),
                role=UserRole.admin,
                is_active=True,
            )
        )
        await session.commit()
        logger.info("Admin user created", extra={"username": email})


if __name__ == "__main__":
    setup_logging()
    asyncio.run(create_admin())
