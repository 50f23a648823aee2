"""
User record lookups and writes.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import User

logger = logging.getLogger(__name__)


class UserService:
    async def user_exists(self, db: AsyncSession, email: str) -> bool:
        result = await db.execute(select(User.id).where(User.email == email))
        return result.first() is not None

    async def document_exists(self, db: AsyncSession, document: str) -> bool:
        result = await db.execute(select(User.id).where(User.document == document))
        return result.first() is not None

    async def get_user_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def create_user(
        self,
        db: AsyncSession,
        *,
        name: str,
        document: str,
        email: str,
        password_hash: str,
    ) -> User:
        """Insert a user and flush it; the caller owns the commit.

        Duplicates surface as ``IntegrityError`` on flush.
        """
        user = User(name=name, document=document, email=email, password=password_hash)
        db.add(user)
        await db.flush()
        return user

    async def delete_user(self, db: AsyncSession, user_id: int) -> bool:
        """Delete a user; their sessions go with it through ``ON DELETE CASCADE``.

        Returns ``False`` when no such user exists.
        """
        result = await db.execute(delete(User).where(User.id == user_id))
        await db.commit()
        deleted = result.rowcount > 0
        if deleted:
            logger.info("Deleted user %s and their sessions", user_id)
        return deleted
