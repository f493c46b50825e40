from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from shared.errors import Unauthorized
from .jwt_handler import verify_access_token

# Defines the expected header format (Bearer <token>)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="login", auto_error=False)


def authenticate(token: str | None) -> str:
    """Resolves a bearer token to the account id it was issued for."""
    if not token:
        raise Unauthorized("Missing auth header")

    payload = verify_access_token(token)
    if payload is None:
        raise Unauthorized("Invalid token")

    user_id = payload.get("sub")
    if not user_id:
        raise Unauthorized("Invalid token")
    return str(user_id)


async def get_current_user(request: Request, token: str = Depends(oauth2_scheme)) -> str:
    """Dependency to validate JWT and return the user ID (sub)."""
    user_id = authenticate(token)
    # Store in request state for downstream use (like rate limiting)
    request.state.user_id = user_id
    return user_id
