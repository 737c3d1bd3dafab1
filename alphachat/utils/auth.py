"""
Authentication utilities - password hashing and bearer tokens.

Tokens only identify the user (``sub`` is the user id). Role and subscription
tier are re-read from storage on every request, so a promotion or downgrade
applies to tokens that were issued earlier.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
import bcrypt
from jose import JWTError, jwt

from ..config import Settings, settings
from ..models import TokenData


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode('utf-8'), hashed_password.encode('utf-8'))
    except ValueError:
        # Stored hash is not a bcrypt hash
        return False


def create_access_token(
    user_id: str,
    username: str,
    expires_delta: Optional[timedelta] = None,
    config: Settings = settings,
) -> str:
    """
    Issue a signed bearer token for a user.

    Args:
        user_id: Stored user id, carried as ``sub``
        username: Informational claim
        expires_delta: Lifetime, defaults to ``access_token_expire_minutes``
        config: Settings holding the signing key and algorithm
    """
    lifetime = expires_delta or timedelta(minutes=config.access_token_expire_minutes)
    claims = {
        "sub": user_id,
        "username": username,
        "exp": datetime.now(timezone.utc) + lifetime,
    }
    return jwt.encode(claims, config.secret_key, algorithm=config.algorithm)


def decode_access_token(token: str, config: Settings = settings) -> Optional[TokenData]:
    """Verify signature and expiry. Returns None for any invalid token."""
    try:
        claims = jwt.decode(token, config.secret_key, algorithms=[config.algorithm])
    except JWTError:
        return None

    if not claims.get("sub"):
        return None
    return TokenData(user_id=claims["sub"], username=claims.get("username"))
