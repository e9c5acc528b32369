from datetime import datetime
from typing import NewType
from uuid import UUID

from pydantic import Field

from blogsmith.core.db import MongoModel
from blogsmith.utils import now

AuthToken = NewType("AuthToken", str)

# Login sessions expire 30 days after sign-in
SESSION_TTL_SECONDS = 30 * 24 * 60 * 60


class AuthSession(MongoModel):
    """Login session issued by /auth/login.

    Not to be confused with workflow or chat sessions. Collection `auth_sessions`,
    indexed on auth_token (unique), user_id, created_at (TTL).
    """

    user_id: UUID
    auth_token: str
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime = Field(default_factory=now)
