from typing import Any

from pydantic import BaseModel, EmailStr


class UserCreate(BaseModel):
    email: EmailStr
    password: str


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class ProfileUpdate(BaseModel):
    userName: str | None = None
    avatar: str | None = None
    # Validated by the service so bad arrays get a readable message
    openCategories: Any = None
    purchasedStages: Any = None


class UserResponse(BaseModel):
    id: str
    email: str
    userName: str | None
    avatar: str | None
    openCategories: list[int]
    purchasedStages: list[int]
    createdAt: str | None

    @classmethod
    def from_user(cls, user) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            userName=user.user_name,
            avatar=user.avatar,
            openCategories=list(user.open_categories or []),
            purchasedStages=list(user.purchased_stages or []),
            createdAt=user.created_at.isoformat() if user.created_at else None,
        )


class TokenResponse(BaseModel):
    message: str
    token: str
    token_type: str = "bearer"
    user: UserResponse


class ProfileResponse(BaseModel):
    message: str | None = None
    user: UserResponse
