"""
User Storage - Persistent user records on a StorageInterface.
"""

import asyncio
import json
import logging
import uuid
from typing import Optional, Dict, Any

from pydantic import ValidationError as PydanticValidationError

from .interface import StorageInterface
from ..core.errors import StorageError, ValidationError
from ..core.session_state import utc_now
from ..models.user import UserInDB, Subscription, SubscriptionFeatures

logger = logging.getLogger(__name__)


class UserStorage:
    """
    Manages persistent storage of user data.
    One JSON file per user in ``users/`` plus a username → user_id index.
    """

    def __init__(self, storage: StorageInterface, default_features: Optional[SubscriptionFeatures] = None):
        """
        Args:
            storage: StorageInterface implementation (typically LocalStorage)
            default_features: Limits given to newly registered users
        """
        self.storage = storage
        self.default_features = default_features or SubscriptionFeatures()
        self.users_dir = "users"
        self._username_index_path = f"{self.users_dir}/username_index.json"
        self._lock = asyncio.Lock()

    def _user_path(self, user_id: str) -> str:
        return f"{self.users_dir}/{user_id}.json"

    async def _load_username_index(self) -> Dict[str, str]:
        content = await self.storage.load(self._username_index_path)
        if content is None:
            return {}
        return json.loads(content.decode('utf-8'))

    async def _save(self, path: str, content: str) -> None:
        if not await self.storage.save(path, content):
            raise StorageError(f"Failed to write {path}")

    async def get_user(self, user_id: str) -> Optional[UserInDB]:
        """
        Get user by user_id.

        Returns:
            Optional[UserInDB]: User data or None if not found
        """
        try:
            uuid.UUID(user_id)
        except (TypeError, ValueError):
            return None

        content = await self.storage.load(self._user_path(user_id))
        if content is None:
            return None
        try:
            return UserInDB.model_validate_json(content)
        except PydanticValidationError as e:
            logger.error(f"Corrupt user record {user_id}: {e}")
            return None

    async def get_user_by_username(self, username: str) -> Optional[UserInDB]:
        index = await self._load_username_index()
        user_id = index.get(username)
        if user_id is None:
            return None
        return await self.get_user(user_id)

    async def create_user(
        self,
        username: str,
        hashed_password: str,
        email: Optional[str] = None,
        role: str = "user",
    ) -> UserInDB:
        """
        Create a new user on the free tier.

        Raises:
            ValidationError: If the username is already taken
        """
        async with self._lock:
            index = await self._load_username_index()
            if username in index:
                raise ValidationError("Username already registered")

            now = utc_now()
            user = UserInDB(
                user_id=str(uuid.uuid4()),
                username=username,
                email=email,
                hashed_password=hashed_password,
                role=role,
                subscription=Subscription(features=self.default_features.model_copy()),
                created_at=now,
                updated_at=now,
            )
            await self._save(self._user_path(user.user_id), user.model_dump_json(indent=2))

            index[username] = user.user_id
            await self._save(self._username_index_path, json.dumps(index, indent=2))

        logger.info(f"Created user {username} ({user.user_id}), role={role}")
        return user

    async def update_user(self, user_id: str, updates: Dict[str, Any]) -> Optional[UserInDB]:
        """
        Update top-level user fields.

        Returns:
            Optional[UserInDB]: Updated user, or None if the user was not found
        """
        async with self._lock:
            user = await self.get_user(user_id)
            if user is None:
                return None
            data = {**user.model_dump(), **updates, "updated_at": utc_now()}
            updated = UserInDB.model_validate(data)
            await self._save(self._user_path(user_id), updated.model_dump_json(indent=2))
            return updated

    async def ensure_admin(self, username: str, hashed_password: str) -> UserInDB:
        """
        Create the admin account, or promote an existing user with that name.
        Admins get the unlimited "pro" subscription.
        """
        user = await self.get_user_by_username(username)
        if user is None:
            user = await self.create_user(username, hashed_password, role="admin")
        elif user.role == "admin":
            return user

        promoted = await self.update_user(user.user_id, {
            "role": "admin",
            "hashed_password": hashed_password,
            "subscription": {**user.subscription.model_dump(), "type": "pro"},
        })
        logger.info(f"Admin account ready: {username}")
        return promoted
