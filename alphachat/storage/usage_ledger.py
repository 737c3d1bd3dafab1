"""
Usage Ledger - append-only record of AI outputs per user and day.

Records live in ``usage/<user_id>/<YYYY-MM-DD>.json`` (server-local date) and
are independent of the chat records that produced them: deleting, expiring or
sweeping a temporary session never changes what a user has used today.
"""

import asyncio
import json
import logging
import re
from datetime import date, datetime
from typing import Callable, Iterable, List, Optional

from .interface import StorageInterface
from ..core.errors import StorageError
from ..core.session_state import utc_now
from ..models.usage import UsageRecord

logger = logging.getLogger(__name__)

_USER_ID_RE = re.compile(r"^[0-9A-Za-z-]+$")


class UsageLedger:
    """Appends usage records and counts them back on demand."""

    def __init__(self, storage: StorageInterface, clock: Callable[[], datetime] = utc_now):
        """
        Args:
            storage: Underlying document storage
            clock: Returns the current timezone-aware time
        """
        self.storage = storage
        self.clock = clock
        self.usage_dir = "usage"
        self._lock = asyncio.Lock()

    def _user_dir(self, user_id: str) -> str:
        if not isinstance(user_id, str) or not _USER_ID_RE.match(user_id):
            raise ValueError(f"Invalid user id for usage ledger: {user_id!r}")
        return f"{self.usage_dir}/{user_id}"

    @staticmethod
    def _day_of(moment: datetime) -> date:
        return moment.astimezone().date()

    async def _load_day(self, path: str) -> List[UsageRecord]:
        content = await self.storage.load(path)
        if content is None:
            return []
        return [UsageRecord.model_validate(item) for item in json.loads(content)]

    async def record(
        self,
        user_id: str,
        category: str,
        model: Optional[str] = None,
        tokens: int = 0,
    ) -> UsageRecord:
        """
        Append one output record stamped with the current time.

        Raises:
            StorageError: If the record could not be written
        """
        entry = UsageRecord(category=category, model=model, tokens=max(tokens, 0), timestamp=self.clock())
        path = f"{self._user_dir(user_id)}/{self._day_of(entry.timestamp).isoformat()}.json"

        async with self._lock:
            records = await self._load_day(path)
            records.append(entry)
            content = json.dumps([r.model_dump(mode="json") for r in records])
            if not await self.storage.save(path, content):
                raise StorageError(f"Failed to record usage for user {user_id}")

        logger.debug(f"Recorded {category} output for user {user_id}")
        return entry

    async def count(self, user_id: str, categories: Iterable[str], since: datetime) -> int:
        """Number of records of the given categories written at or after ``since``."""
        wanted = set(categories)
        first_day = self._day_of(since).isoformat()
        total = 0
        for path in await self.storage.list(self._user_dir(user_id), pattern="*.json"):
            # File names are ISO dates, so they sort and compare as strings
            if path.rsplit("/", 1)[-1][:-len(".json")] < first_day:
                continue
            total += sum(
                1 for r in await self._load_day(path)
                if r.category in wanted and r.timestamp >= since
            )
        return total
