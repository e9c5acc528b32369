from typing import Any
from uuid import UUID

import structlog
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase

from blogsmith.core.core import Service
from blogsmith.core.modules.chat.models import (
    DEFAULT_CHAT_TITLE,
    ChatMessage,
    ChatSession,
    MessageCosts,
    MessageModel,
    MessageRole,
    MessageTokens,
)
from blogsmith.errors import NotFoundError, ValidationError
from blogsmith.utils import now

logger = structlog.get_logger(__name__)


class ChatService(Service):
    """Chat sessions and their messages."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._sessions = database.get_collection("chat_sessions")
        self._messages = database.get_collection("chat_messages")

    async def on_start(self) -> None:
        await self._sessions.create_index([("user_id", ASCENDING), ("updated_at", DESCENDING)])
        await self._sessions.create_index([("updated_at", DESCENDING)])
        await self._messages.create_index([("session_id", ASCENDING), ("created_at", ASCENDING)])

    async def list_sessions(self, user_id: UUID | None = None, limit: int = 50) -> list[ChatSession]:
        """Sessions ordered by most recent activity; all users when user_id is None."""
        query: dict[str, Any] = {} if user_id is None else {"user_id": user_id}
        cursor = self._sessions.find(query).sort("updated_at", DESCENDING).limit(limit)
        return await ChatSession.list_cursor(cursor)

    async def create_session(self, user_id: UUID, title: str | None = None) -> ChatSession:
        session = ChatSession(user_id=user_id, title=title or DEFAULT_CHAT_TITLE)
        await self._sessions.insert_one(session.to_mongo())
        logger.debug("chat_session_created", session_id=session.id, user_id=user_id)
        return session

    async def get_session(self, session_id: UUID, user_id: UUID | None = None) -> ChatSession:
        """Get session; when user_id is given, sessions of other users are reported as missing."""
        query: dict[str, Any] = {"_id": session_id}
        if user_id is not None:
            query["user_id"] = user_id
        session = await ChatSession.find_one(self._sessions, query)
        if session is None:
            raise NotFoundError("Session not found")
        return session

    async def rename_session(self, session_id: UUID, user_id: UUID, title: str) -> ChatSession:
        if not title.strip():
            raise ValidationError("Title is required")
        doc = await self._sessions.find_one_and_update(
            {"_id": session_id, "user_id": user_id},
            {"$set": {"title": title, "updated_at": now()}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFoundError("Session not found")
        return ChatSession.model_validate(doc)

    async def get_messages(self, session_id: UUID) -> list[ChatMessage]:
        """Messages of a session, oldest first."""
        cursor = self._messages.find({"session_id": session_id}).sort("created_at", ASCENDING)
        return await ChatMessage.list_cursor(cursor)

    async def add_message(
        self,
        session_id: UUID,
        user_id: UUID,
        role: MessageRole,
        content: str,
        model: MessageModel | None = None,
        api_provider: str | None = None,
        tokens: MessageTokens | None = None,
        costs: MessageCosts | None = None,
    ) -> ChatMessage:
        """Append message to user's own session and roll its totals forward."""
        if not content:
            raise ValidationError("Missing required fields")
        await self.get_session(session_id, user_id)

        tokens = tokens or MessageTokens()
        costs = costs or MessageCosts()
        message = ChatMessage(
            session_id=session_id,
            user_id=user_id,
            role=role,
            content=content,
            model_id=model.id if model else None,
            model_name=(model.name or model.id) if model else None,
            api_provider=api_provider,
            input_tokens=tokens.input,
            output_tokens=tokens.output,
            total_tokens=tokens.total,
            input_price_per_token=costs.input_price,
            output_price_per_token=costs.output_price,
            input_cost_usd=costs.input_cost,
            output_cost_usd=costs.output_cost,
            total_cost_usd=costs.total_cost,
            total_cost_inr=costs.total_cost_inr,
        )
        await self._messages.insert_one(message.to_mongo())
        await self._sessions.update_one(
            {"_id": session_id},
            {
                "$inc": {
                    "total_messages": 1,
                    "total_tokens": message.total_tokens,
                    "total_cost_usd": message.total_cost_usd,
                    "total_cost_inr": message.total_cost_inr,
                },
                "$set": {"updated_at": message.created_at},
            },
        )
        return message
