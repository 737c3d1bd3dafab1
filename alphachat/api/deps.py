"""
Shared FastAPI dependencies.

Services are built once in the application lifespan and kept on
``app.state``; routes reach them through these functions.
"""

from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..config import Settings
from ..core.errors import AuthorizationError
from ..models import UserInDB
from ..services import AIGenerationService, TemporaryChatService, UsageAccountant
from ..storage import UserStorage
from ..utils.auth import decode_access_token

# auto_error=False so anonymous callers reach optional-auth routes
security = HTTPBearer(auto_error=False)


def get_config(request: Request) -> Settings:
    return request.app.state.config


def get_chat_service(request: Request) -> TemporaryChatService:
    return request.app.state.chat_service


def get_ai_service(request: Request) -> AIGenerationService:
    return request.app.state.ai_service


def get_user_storage(request: Request) -> UserStorage:
    return request.app.state.user_storage


def get_usage_accountant(request: Request) -> UsageAccountant:
    return request.app.state.usage_accountant


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    users: UserStorage = Depends(get_user_storage),
    config: Settings = Depends(get_config),
) -> Optional[UserInDB]:
    """Resolve the bearer token to a user, or None when absent or invalid."""
    if credentials is None:
        return None
    token_data = decode_access_token(credentials.credentials, config)
    if token_data is None:
        return None
    user = await users.get_user(token_data.user_id)
    if user is None or not user.is_active:
        return None
    return user


async def get_current_user(
    user: Optional[UserInDB] = Depends(get_optional_user),
) -> UserInDB:
    """
    Require an authenticated user.

    Raises:
        HTTPException: 401 if the token is missing or invalid
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def require_admin(user: UserInDB = Depends(get_current_user)) -> UserInDB:
    if user.role != "admin":
        raise AuthorizationError("Admin access required")
    return user


def get_client_ip(request: Request) -> Optional[str]:
    """Client address, honouring the first X-Forwarded-For hop."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else None
