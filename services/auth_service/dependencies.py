from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security.dependencies import get_current_user

from .models import User
from .service import AuthService


async def get_current_account(
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Like get_current_user, but also loads the account row."""
    return await AuthService.get_account(db, user_id)
