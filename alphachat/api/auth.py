"""
Authentication API endpoints.
"""

from fastapi import APIRouter, HTTPException, status, Depends

from ..config import Settings
from ..models import UserCreate, LoginRequest, Token, User, UserInDB
from ..services import UsageAccountant
from ..storage import UserStorage
from ..utils.auth import create_access_token, hash_password, verify_password
from .deps import get_config, get_current_user, get_user_storage, get_usage_accountant

router = APIRouter(prefix="/api/auth", tags=["authentication"])


def _public(user: UserInDB) -> User:
    return User.model_validate(user.model_dump(exclude={"hashed_password"}))


@router.post("/register", response_model=User, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, users: UserStorage = Depends(get_user_storage)):
    """
    Register a new user on the free tier.

    Returns:
        User: The created user
    """
    user = await users.create_user(
        username=user_data.username,
        hashed_password=hash_password(user_data.password),
        email=user_data.email,
    )
    return _public(user)


@router.post("/login", response_model=Token)
async def login(
    credentials: LoginRequest,
    users: UserStorage = Depends(get_user_storage),
    config: Settings = Depends(get_config),
):
    """
    Exchange username and password for a bearer token.

    Raises:
        HTTPException: 401 on unknown user or wrong password
    """
    user = await users.get_user_by_username(credentials.username)
    if user is None or not verify_password(credentials.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    token = create_access_token(user.user_id, user.username, config=config)
    return Token(access_token=token)


@router.get("/me", response_model=User)
async def get_me(user: UserInDB = Depends(get_current_user)):
    """Get the current user's profile."""
    return _public(user)


@router.get("/usage/{category}")
async def get_usage(
    category: str,
    user: UserInDB = Depends(get_current_user),
    usage: UsageAccountant = Depends(get_usage_accountant),
):
    """Get today's usage against the caller's limit for a category (chat, code, image, video)."""
    status_ = await usage.get_usage(user.user_id, category)
    return status_.model_dump()
