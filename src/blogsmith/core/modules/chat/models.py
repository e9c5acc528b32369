from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, Field

from blogsmith.core.db import MongoModel
from blogsmith.core.modules.user.models import UserSummary
from blogsmith.utils import now

DEFAULT_CHAT_TITLE = "New Chat"


class MessageRole(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ChatSession(MongoModel):
    """Assistant chat conversation owned by a user, with running totals.

    Indexed on (user_id, updated_at desc).
    """

    user_id: UUID
    title: str = DEFAULT_CHAT_TITLE
    created_at: datetime = Field(default_factory=now)
    updated_at: datetime = Field(default_factory=now)
    total_messages: int = 0
    total_cost_usd: float = 0
    total_cost_inr: float = 0
    total_tokens: int = 0


class MessageTokens(BaseModel):
    input: int = 0
    output: int = 0
    total: int = 0


class MessageCosts(BaseModel):
    input_price: float = 0
    output_price: float = 0
    input_cost: float = 0
    output_cost: float = 0
    total_cost: float = 0
    total_cost_inr: float = 0


class MessageModel(BaseModel):
    id: str
    name: str | None = None


class ChatMessage(MongoModel):
    """Single message in a chat session.

    Indexed on (session_id, created_at).
    """

    session_id: UUID
    user_id: UUID
    role: MessageRole
    content: str
    model_id: str | None = None
    model_name: str | None = None
    api_provider: str | None = None
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    input_price_per_token: float = 0
    output_price_per_token: float = 0
    input_cost_usd: float = 0
    output_cost_usd: float = 0
    total_cost_usd: float = 0
    total_cost_inr: float = 0
    created_at: datetime = Field(default_factory=now)


class ChatSessionWithMessages(BaseModel):
    session: ChatSession
    messages: list[ChatMessage]
    user: UserSummary | None = None


class ChatSessionWithUser(ChatSession):
    user: UserSummary | None = None
