from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import Conflict

from .models import User


class UserRepository:

    @staticmethod
    async def create(db: AsyncSession, user: User) -> User:
        db.add(user)
        try:
            await db.commit()
        except IntegrityError:
            # Lost a race with another registration for the same email
            await db.rollback()
            raise Conflict("User exists")
        await db.refresh(user)
        return user

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalars().first()

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    @staticmethod
    async def update_fields(db: AsyncSession, user_id: str, fields: dict[str, Any]) -> Optional[User]:
        user = await UserRepository.get_by_id(db, user_id)
        if not user:
            return None
        for name, value in fields.items():
            setattr(user, name, value)
        await db.commit()
        await db.refresh(user)
        return user
