"""
Usage Accountant - daily per-category quotas by subscription tier.

Usage is recomputed on every check by rescanning the user's usage ledger since
local midnight. There is no running counter, so a crashed request can never
leave a counter out of step, at the cost of one scan per check.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, Optional, Tuple

from ..core.errors import QuotaExceededError, ValidationError
from ..core.session_state import utc_now
from ..models.usage import QuotaStatus, UsageRecord
from ..models.user import UserInDB
from ..storage.usage_ledger import UsageLedger
from ..storage.user_storage import UserStorage

logger = logging.getLogger(__name__)

# action category -> (quota bucket, recorded categories counted against it)
QUOTA_BUCKETS: Dict[str, Tuple[str, Tuple[str, ...]]] = {
    "chat": ("chat", ("chat", "code")),
    "code": ("chat", ("chat", "code")),
    "image": ("image", ("image",)),
    "video": ("video", ("video",)),
}

LIMITED_TIERS = frozenset({"free"})


def local_midnight(now: datetime) -> datetime:
    """Start of "today" in the server's local timezone."""
    return now.astimezone().replace(hour=0, minute=0, second=0, microsecond=0)


def _limit_for(user: UserInDB, bucket: str) -> int:
    features = user.subscription.features
    return {
        "chat": features.daily_chat_limit,
        "image": features.daily_image_limit,
        "video": features.daily_video_limit,
    }[bucket]


def _bucket(category: str) -> Tuple[str, Tuple[str, ...]]:
    if category not in QUOTA_BUCKETS:
        raise ValidationError(f"Unknown usage category: {category}")
    return QUOTA_BUCKETS[category]


class UsageAccountant:
    """Checks a user's daily consumption against the limits of their tier."""

    def __init__(
        self,
        users: UserStorage,
        ledger: UsageLedger,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.users = users
        self.ledger = ledger
        self.clock = clock

    async def get_usage(self, user_id: str, category: str) -> QuotaStatus:
        """
        Report usage for a category without enforcing the limit.

        Raises:
            ValidationError: If the category is unknown
        """
        bucket, counted = _bucket(category)

        user: Optional[UserInDB] = await self.users.get_user(user_id)
        if user is None:
            return QuotaStatus(category=bucket, allowed=True, used=0, limit=None)

        since = local_midnight(self.clock())
        used = await self.ledger.count(user.user_id, counted, since)

        if user.role == "admin" or user.subscription.type not in LIMITED_TIERS:
            return QuotaStatus(category=bucket, allowed=True, used=used, limit=None)

        limit = _limit_for(user, bucket)
        return QuotaStatus(category=bucket, allowed=used < limit, used=used, limit=limit)

    async def check_quota(self, user_id: str, category: str) -> QuotaStatus:
        """
        Enforce the daily limit for a category.

        Raises:
            QuotaExceededError: If a limited tier has used its allowance
        """
        status = await self.get_usage(user_id, category)
        if not status.allowed:
            logger.warning(
                f"Quota exceeded for user {user_id}",
                extra={"extra_fields": {
                    "user_id": user_id,
                    "category": status.category,
                    "used": status.used,
                    "limit": status.limit,
                }}
            )
            raise QuotaExceededError(status.category, status.used, status.limit)
        return status

    async def record_output(
        self,
        user_id: str,
        category: str,
        model: Optional[str] = None,
        tokens: int = 0,
    ) -> UsageRecord:
        """Count one generated output against the user's day."""
        _bucket(category)
        return await self.ledger.record(user_id, category, model=model, tokens=tokens)
