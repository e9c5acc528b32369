from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from blogsmith.core.db import MongoModel
from blogsmith.utils import now


class User(MongoModel):
    """User domain model with credentials and profile."""

    email: str
    password_hash: str  # bcrypt hash
    full_name: str | None = None
    avatar_url: str | None = None
    is_admin: bool = False
    is_approved: bool = False
    created_at: datetime = Field(default_factory=now)
    last_sign_in_at: datetime | None = None


class UserView(BaseModel):
    """User account information (API representation)."""

    id: UUID = Field(..., description="User ID")
    email: str = Field(..., description="Email used to sign in")
    full_name: str | None = Field(None, description="Display name")
    avatar_url: str | None = Field(None, description="Avatar image URL")
    is_admin: bool = Field(..., description="Whether the user has admin privileges")
    is_approved: bool = Field(..., description="Whether an admin approved the account")
    created_at: datetime = Field(..., description="Registration time")
    last_sign_in_at: datetime | None = Field(None, description="Last successful login")

    @classmethod
    def from_domain(cls, user: User) -> "UserView":
        """Create view model from domain model."""
        return cls(
            id=user.id,
            email=user.email,
            full_name=user.full_name,
            avatar_url=user.avatar_url,
            is_admin=user.is_admin,
            is_approved=user.is_approved,
            created_at=user.created_at,
            last_sign_in_at=user.last_sign_in_at,
        )


class UserSummary(BaseModel):
    """Short owner description attached to admin listings."""

    id: UUID
    email: str
    full_name: str | None = None
    created_at: datetime

    @classmethod
    def from_domain(cls, user: User) -> "UserSummary":
        return cls(id=user.id, email=user.email, full_name=user.full_name, created_at=user.created_at)
