"""
Usage Models - Generated-output records and quota status.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class UsageRecord(BaseModel):
    """One AI output produced for a user. Never edited or removed once written."""
    category: str  # chat, code, image, video
    model: Optional[str] = None
    tokens: int = 0
    timestamp: datetime


class QuotaStatus(BaseModel):
    """Result of a daily quota check."""
    category: str
    allowed: bool
    used: int
    limit: Optional[int] = None  # None when the tier is unlimited
