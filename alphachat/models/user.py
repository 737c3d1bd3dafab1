"""
User Model - Defines the user data structure and subscription tiers.
"""

from datetime import datetime
from typing import Optional, Literal
from pydantic import BaseModel, EmailStr, Field

UserRole = Literal["user", "admin"]
SubscriptionType = Literal["free", "premium", "pro"]


class SubscriptionFeatures(BaseModel):
    """Per-day limits attached to a subscription."""
    daily_chat_limit: int = 50
    daily_image_limit: int = 5
    daily_video_limit: int = 2


class Subscription(BaseModel):
    type: SubscriptionType = "free"
    expires_at: Optional[datetime] = None
    features: SubscriptionFeatures = Field(default_factory=SubscriptionFeatures)


class UserBase(BaseModel):
    """Base user model with common fields."""
    username: str = Field(..., min_length=3, max_length=50)
    email: Optional[EmailStr] = None


class UserCreate(UserBase):
    """User creation model with password."""
    password: str = Field(..., min_length=6)


class LoginRequest(BaseModel):
    username: str
    password: str


class User(UserBase):
    """User model with all public fields."""
    user_id: str
    role: UserRole = "user"
    subscription: Subscription = Field(default_factory=Subscription)
    created_at: datetime
    updated_at: datetime
    is_active: bool = True


class UserInDB(User):
    """User model as stored, with hashed password."""
    hashed_password: str


class Token(BaseModel):
    """JWT token response model."""
    access_token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    """Token payload data."""
    user_id: Optional[str] = None
    username: Optional[str] = None
