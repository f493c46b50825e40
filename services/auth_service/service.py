import math
import uuid

import structlog
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import Conflict, InvalidRequest, NotFound, Unauthorized
from shared.security.jwt_handler import create_access_token

from .models import User
from .repository import UserRepository
from .schemas import ProfileUpdate, ProfileResponse, TokenResponse, UserCreate, UserLogin, UserResponse

logger = structlog.get_logger(__name__)

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

DEFAULT_USER_NAME = "John Doe"
DEFAULT_AVATAR = "https://cdn-icons-png.flaticon.com/512/3135/3135715.png"


def parse_number_array(value) -> list[int]:
    """Accepts finite integral numbers or numeric strings; keeps order and duplicates."""
    if not isinstance(value, list):
        raise InvalidRequest("Expected an array of numbers")

    numbers: list[int] = []
    for item in value:
        if isinstance(item, str) and item.strip():
            try:
                item = float(item)
            except ValueError:
                raise InvalidRequest("Array values must be numbers")
        if isinstance(item, bool) or not isinstance(item, (int, float)):
            raise InvalidRequest("Array values must be numbers")
        try:
            integral = math.isfinite(item) and item == int(item)
        except OverflowError:
            integral = False
        if not integral:
            raise InvalidRequest("Array values must be numbers")
        numbers.append(int(item))
    return numbers


class AuthService:

    @staticmethod
    def _hash_password(password: str) -> str:
        return _pwd_context.hash(password)

    @staticmethod
    def _verify_password(plain: str, hashed: str) -> bool:
        return _pwd_context.verify(plain, hashed)

    @staticmethod
    async def register(db: AsyncSession, data: UserCreate) -> TokenResponse:
        if not data.password:
            raise InvalidRequest("Email + password required")

        existing = await UserRepository.get_by_email(db, data.email)
        if existing:
            raise Conflict("User exists")
        user = User(
            id=str(uuid.uuid4()),
            email=data.email,
            hashed_password=AuthService._hash_password(data.password),
            user_name=DEFAULT_USER_NAME,
            avatar=DEFAULT_AVATAR,
            open_categories=[],
            purchased_stages=[],
        )
        user = await UserRepository.create(db, user)
        logger.info("user_registered", user_id=user.id)

        token = create_access_token(data={"sub": user.id})
        return TokenResponse(message="Registered", token=token, user=UserResponse.from_user(user))

    @staticmethod
    async def login(db: AsyncSession, data: UserLogin) -> TokenResponse:
        user = await UserRepository.get_by_email(db, data.email)
        if not user or not AuthService._verify_password(data.password, user.hashed_password):
            raise Unauthorized("Invalid credentials")

        token = create_access_token(data={"sub": user.id})
        return TokenResponse(message="Login OK", token=token, user=UserResponse.from_user(user))

    @staticmethod
    async def get_account(db: AsyncSession, user_id: str) -> User:
        user = await UserRepository.get_by_id(db, user_id)
        if not user:
            raise Unauthorized("User not found")
        return user

    @staticmethod
    async def update_profile(db: AsyncSession, user: User, data: ProfileUpdate) -> ProfileResponse:
        provided = data.model_fields_set
        updates = {}

        if "userName" in provided:
            updates["user_name"] = data.userName
        if "avatar" in provided:
            updates["avatar"] = data.avatar
        if "openCategories" in provided:
            updates["open_categories"] = parse_number_array(data.openCategories)
        if "purchasedStages" in provided:
            updates["purchased_stages"] = parse_number_array(data.purchasedStages)

        if not updates:
            raise InvalidRequest("No updateable fields provided")

        updated = await UserRepository.update_fields(db, user.id, updates)
        if not updated:
            raise NotFound("User not found")

        logger.info("user_updated", user_id=updated.id, fields=sorted(updates))
        return ProfileResponse(message="User updated", user=UserResponse.from_user(updated))
