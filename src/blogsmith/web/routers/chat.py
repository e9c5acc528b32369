from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path
from pydantic import BaseModel, Field

from blogsmith.core.modules.chat.models import (
    ChatMessage,
    ChatSession,
    ChatSessionWithMessages,
    MessageCosts,
    MessageModel,
    MessageRole,
    MessageTokens,
)
from blogsmith.web.deps import AppDep, AuthTokenDep
from blogsmith.web.openapi import ErrorResponse

router = APIRouter(prefix="/chat", tags=["chat"])

SessionIdPath = Annotated[UUID, Path(description="Chat session ID")]


class CreateChatSessionRequest(BaseModel):
    title: str | None = Field(None, description="Session title, 'New Chat' when omitted")


class RenameChatSessionRequest(BaseModel):
    title: str = Field(..., min_length=1, description="New session title")


class CreateChatMessageRequest(BaseModel):
    role: MessageRole
    content: str = Field(..., min_length=1)
    model: MessageModel | None = None
    api_provider: str | None = None
    tokens: MessageTokens | None = None
    costs: MessageCosts | None = None


@router.get(
    "/sessions",
    summary="List chat sessions",
    description="Get up to 50 chat sessions of the current user, most recently active first.",
    operation_id="listChatSessions",
    responses={401: {"model": ErrorResponse, "description": "Not authenticated"}},
)
async def list_chat_sessions(app: AppDep, auth_token: AuthTokenDep) -> list[ChatSession]:
    return await app.get_chat_sessions(auth_token)


@router.post(
    "/sessions",
    summary="Create chat session",
    operation_id="createChatSession",
    status_code=201,
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Account pending approval"},
    },
)
async def create_chat_session(request: CreateChatSessionRequest, app: AppDep, auth_token: AuthTokenDep) -> ChatSession:
    return await app.create_chat_session(auth_token, request.title)


@router.patch(
    "/sessions/{session_id}",
    summary="Rename chat session",
    operation_id="renameChatSession",
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
async def rename_chat_session(
    session_id: SessionIdPath, request: RenameChatSessionRequest, app: AppDep, auth_token: AuthTokenDep
) -> ChatSession:
    return await app.rename_chat_session(auth_token, session_id, request.title)


@router.get(
    "/sessions/{session_id}/messages",
    summary="Get chat session with messages",
    operation_id="getChatSessionMessages",
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
async def get_chat_session_messages(session_id: SessionIdPath, app: AppDep, auth_token: AuthTokenDep) -> ChatSessionWithMessages:
    return await app.get_chat_session_messages(auth_token, session_id)


@router.post(
    "/sessions/{session_id}/messages",
    summary="Add chat message",
    description="Append a message to one of the current user's sessions and update the session totals.",
    operation_id="createChatMessage",
    status_code=201,
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Account pending approval"},
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
async def create_chat_message(
    session_id: SessionIdPath, request: CreateChatMessageRequest, app: AppDep, auth_token: AuthTokenDep
) -> ChatMessage:
    return await app.add_chat_message(
        auth_token,
        session_id,
        request.role,
        request.content,
        request.model,
        request.api_provider,
        request.tokens,
        request.costs,
    )
