import secrets
from datetime import timedelta
from typing import Any
from uuid import UUID

from pymongo.asynchronous.database import AsyncDatabase

from blogsmith.core.core import Service
from blogsmith.core.modules.history.models import RequestMeta
from blogsmith.core.modules.session.models import SESSION_TTL_SECONDS, AuthSession, AuthToken
from blogsmith.core.modules.user.models import User
from blogsmith.errors import AuthenticationError
from blogsmith.utils import now


class SessionService(Service):
    """Service for managing user login sessions."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("auth_sessions")
        self._sessions: dict[AuthToken, AuthSession] = {}

    async def on_start(self) -> None:
        """Create indexes on startup."""
        await self._collection.create_index([("auth_token", 1)], unique=True)
        await self._collection.create_index([("user_id", 1)])
        await self._collection.create_index([("created_at", 1)], expireAfterSeconds=SESSION_TTL_SECONDS)

    async def create_session(self, user_id: UUID, meta: RequestMeta | None = None) -> AuthToken:
        auth_token = AuthToken(secrets.token_urlsafe(32))
        new_session = AuthSession(user_id=user_id, auth_token=auth_token)
        if meta is not None:
            new_session.ip_address = meta.ip_address
            new_session.user_agent = meta.user_agent
        await self._collection.insert_one(new_session.to_mongo())
        self._sessions[auth_token] = new_session
        return auth_token

    async def get_authenticated_user(self, auth_token: AuthToken) -> User:
        users = self.core.services.user

        # Sessions are cached by token; the user itself always comes from the user cache
        session = self._sessions.get(auth_token)
        if session is None:
            session = await AuthSession.find_one(self._collection, {"auth_token": auth_token})
            if session is None:
                raise AuthenticationError("Invalid or expired session")

        # The TTL index removes expired documents lazily, so check the age here too
        expired = session.created_at + timedelta(seconds=SESSION_TTL_SECONDS) < now()
        if expired or not users.has_user(session.user_id):
            self._sessions.pop(auth_token, None)
            raise AuthenticationError("Invalid or expired session")

        self._sessions[auth_token] = session
        return users.get_user(session.user_id)

    async def is_auth_token_valid(self, auth_token: AuthToken) -> bool:
        try:
            await self.get_authenticated_user(auth_token)
        except AuthenticationError:
            return False
        return True

    async def invalidate_session(self, auth_token: AuthToken) -> None:
        """Invalidate a session by removing it from the database."""
        self._sessions.pop(auth_token, None)
        await self._collection.delete_one({"auth_token": auth_token})
