from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security import limiter

from .dependencies import get_current_account
from .models import User
from .schemas import ProfileResponse, ProfileUpdate, TokenResponse, UserCreate, UserLogin, UserResponse
from .service import AuthService

router = APIRouter(tags=["Authentication"])


@router.post(
    "/register",
    response_model=TokenResponse,
    summary="Register a new user account",
)
async def register(payload: UserCreate, db: AsyncSession = Depends(get_db)):
    return await AuthService.register(db, payload)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Authenticate and receive a bearer token",
)
@limiter.limit("10/minute")
async def login(request: Request, payload: UserLogin, db: AsyncSession = Depends(get_db)):
    return await AuthService.login(db, payload)


@router.get(
    "/me",
    response_model=ProfileResponse,
    summary="Get the current authenticated user's profile",
)
async def get_me(user: User = Depends(get_current_account)):
    return ProfileResponse(user=UserResponse.from_user(user))


@router.patch(
    "/me",
    response_model=ProfileResponse,
    summary="Update profile fields and unlocked content",
)
async def update_me(
    payload: ProfileUpdate,
    user: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return await AuthService.update_profile(db, user, payload)
