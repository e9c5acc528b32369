from typing import Any
from uuid import UUID

import bcrypt
import structlog
from pymongo.asynchronous.database import AsyncDatabase

from blogsmith.core.core import Service
from blogsmith.core.modules.user.models import User
from blogsmith.core.modules.user.validators import normalize_email, validate_password
from blogsmith.errors import NotFoundError, ValidationError
from blogsmith.utils import now

logger = structlog.get_logger(__name__)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


class UserService(Service):
    """Manages users with in-memory cache."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("users")
        self._users: dict[UUID, User] = {}

    def get_user(self, user_id: UUID) -> User:
        """Get user by ID from cache."""
        if user_id not in self._users:
            raise NotFoundError(f"User '{user_id}' not found")
        return self._users[user_id]

    def get_user_by_email(self, email: str) -> User:
        """Get user by email from cache."""
        user = self._find_by_email(email)
        if user is None:
            raise NotFoundError(f"User '{email}' not found")
        return user

    def has_user(self, user_id: UUID) -> bool:
        return user_id in self._users

    def has_email(self, email: str) -> bool:
        return self._find_by_email(email) is not None

    def get_all_users(self) -> list[User]:
        """Get all users, newest registration first."""
        return sorted(self._users.values(), key=lambda u: u.created_at, reverse=True)

    async def create_user(
        self,
        email: str,
        password: str,
        full_name: str | None = None,
        is_admin: bool = False,
        is_approved: bool = False,
    ) -> User:
        """Create user with hashed password."""
        email = normalize_email(email)
        if self.has_email(email):
            raise ValidationError(f"User '{email}' already exists")

        validate_password(password)
        user = User(
            email=email,
            password_hash=hash_password(password),
            full_name=full_name,
            is_admin=is_admin,
            is_approved=is_approved,
        )
        res = await self._collection.insert_one(user.to_mongo())
        logger.info("user_created", user_id=user.id, is_admin=is_admin)
        return await self.update_user_cache(res.inserted_id)

    def verify_password(self, email: str, password: str) -> bool:
        """Verify password against stored hash."""
        user = self._find_by_email(email)
        if user is None:
            return False
        return check_password(password, user.password_hash)

    async def record_sign_in(self, user_id: UUID) -> None:
        await self._collection.update_one({"_id": user_id}, {"$set": {"last_sign_in_at": now()}})
        await self.update_user_cache(user_id)

    async def change_password(self, user_id: UUID, old_password: str, new_password: str) -> None:
        """Change user password after verifying current password."""
        user = self.get_user(user_id)
        if not check_password(old_password, user.password_hash):
            raise ValidationError("Invalid current password")

        validate_password(new_password)
        await self._collection.update_one({"_id": user_id}, {"$set": {"password_hash": hash_password(new_password)}})
        await self.update_user_cache(user_id)

    async def update_profile(self, user_id: UUID, full_name: str | None, avatar_url: str | None) -> User:
        """Replace profile fields; empty values clear them."""
        self.get_user(user_id)
        await self._collection.update_one(
            {"_id": user_id},
            {"$set": {"full_name": full_name or None, "avatar_url": avatar_url or None}},
        )
        return await self.update_user_cache(user_id)

    async def set_approval(self, user_id: UUID, approved: bool) -> User:
        self.get_user(user_id)
        await self._collection.update_one({"_id": user_id}, {"$set": {"is_approved": approved}})
        logger.info("user_approval_changed", user_id=user_id, approved=approved)
        return await self.update_user_cache(user_id)

    async def set_admin(self, user_id: UUID, is_admin: bool) -> User:
        """Grant or revoke admin; granting also approves the account."""
        self.get_user(user_id)
        update: dict[str, bool] = {"is_admin": is_admin}
        if is_admin:
            update["is_approved"] = True
        await self._collection.update_one({"_id": user_id}, {"$set": update})
        logger.info("user_admin_changed", user_id=user_id, is_admin=is_admin)
        return await self.update_user_cache(user_id)

    async def ensure_admin_user_exists(self) -> None:
        """Create default admin user if not exists."""
        config = self.core.config
        if not self.has_email(config.admin_email):
            await self.create_user(config.admin_email, config.admin_password, "Administrator", is_admin=True, is_approved=True)

    async def update_all_users_cache(self) -> None:
        """Reload all users cache from database."""
        users = await User.list_cursor(self._collection.find())
        self._users = {user.id: user for user in users}

    async def update_user_cache(self, user_id: UUID) -> User:
        """Reload a specific user cache from database."""
        user = await User.find_one(self._collection, {"_id": user_id})
        if user is None:
            raise NotFoundError(f"User '{user_id}' not found")
        self._users[user_id] = user
        return user

    async def on_start(self) -> None:
        """Initialize indexes, cache, and admin user."""
        await self._collection.create_index([("email", 1)], unique=True)
        await self.update_all_users_cache()
        await self.ensure_admin_user_exists()
        logger.debug("user_service_started", user_count=len(self._users))

    def _find_by_email(self, email: str) -> User | None:
        email = email.strip().lower()
        return next((u for u in self._users.values() if u.email == email), None)
