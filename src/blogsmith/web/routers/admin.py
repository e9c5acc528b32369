from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Path, Query
from pydantic import BaseModel, Field

from blogsmith.core.modules.admin.models import AdminStatus, UserActivity, UserHistoryReport
from blogsmith.core.modules.chat.models import ChatSessionWithMessages, ChatSessionWithUser
from blogsmith.core.modules.user.models import UserView
from blogsmith.web.deps import AppDep, AuthTokenDep
from blogsmith.web.openapi import ErrorResponse

router = APIRouter(prefix="/admin", tags=["admin"])

ADMIN_RESPONSES: dict[int | str, dict[str, Any]] = {
    401: {"model": ErrorResponse, "description": "Not authenticated"},
    403: {"model": ErrorResponse, "description": "Admin privileges required"},
}

UserIdPath = Annotated[UUID, Path(description="User ID")]


class UserApprovalRequest(BaseModel):
    user_id: UUID = Field(..., description="User to approve or reject")
    approve: bool = Field(..., description="New approval state")


class UserAdminRequest(BaseModel):
    is_admin: bool = Field(..., description="Grant (true) or revoke (false) admin privileges")


@router.get(
    "/check",
    summary="Check admin status",
    description="Admin and approval flags of the current user. Available to any authenticated user.",
    operation_id="checkAdmin",
    responses={401: {"model": ErrorResponse, "description": "Not authenticated"}},
)
async def check_admin(app: AppDep, auth_token: AuthTokenDep) -> AdminStatus:
    return await app.check_admin(auth_token)


@router.get("/users", summary="List users", operation_id="adminListUsers", responses=ADMIN_RESPONSES)
async def list_users(app: AppDep, auth_token: AuthTokenDep) -> list[UserView]:
    return await app.admin_list_users(auth_token)


@router.post(
    "/users/approval",
    summary="Approve or reject user",
    operation_id="adminSetUserApproval",
    responses={**ADMIN_RESPONSES, 404: {"model": ErrorResponse, "description": "User not found"}},
)
async def set_user_approval(request: UserApprovalRequest, app: AppDep, auth_token: AuthTokenDep) -> UserView:
    return await app.admin_set_user_approval(auth_token, request.user_id, request.approve)


@router.put(
    "/users/{user_id}/admin",
    summary="Grant or revoke admin",
    description="Granting admin also approves the account. Admins cannot revoke their own privileges.",
    operation_id="adminSetUserAdmin",
    responses={
        **ADMIN_RESPONSES,
        400: {"model": ErrorResponse, "description": "Cannot revoke own admin privileges"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def set_user_admin(user_id: UserIdPath, request: UserAdminRequest, app: AppDep, auth_token: AuthTokenDep) -> UserView:
    return await app.admin_set_user_admin(auth_token, user_id, request.is_admin)


@router.get(
    "/users/activity",
    summary="Users with usage totals",
    operation_id="adminUsersActivity",
    responses=ADMIN_RESPONSES,
)
async def users_activity(app: AppDep, auth_token: AuthTokenDep) -> list[UserActivity]:
    return await app.admin_users_activity(auth_token)


@router.get(
    "/users/{user_id}/history",
    summary="User history report",
    description="A user's full usage history with totals and statistics.",
    operation_id="adminUserHistory",
    responses={**ADMIN_RESPONSES, 404: {"model": ErrorResponse, "description": "User not found"}},
)
async def user_history(user_id: UserIdPath, app: AppDep, auth_token: AuthTokenDep) -> UserHistoryReport:
    return await app.admin_user_history(auth_token, user_id)


@router.get(
    "/chat-sessions",
    summary="List chat sessions",
    description="Chat sessions of all users, or of one user, most recently active first.",
    operation_id="adminListChatSessions",
    responses=ADMIN_RESPONSES,
)
async def list_chat_sessions(
    app: AppDep,
    auth_token: AuthTokenDep,
    user_id: Annotated[UUID | None, Query(description="Only sessions of this user")] = None,
    limit: Annotated[int, Query(ge=1, le=200, description="Maximum sessions")] = 50,
) -> list[ChatSessionWithUser]:
    return await app.admin_chat_sessions(auth_token, user_id, limit)


@router.get(
    "/chat-sessions/{session_id}/messages",
    summary="Get any chat session with messages",
    operation_id="adminGetChatSessionMessages",
    responses={**ADMIN_RESPONSES, 404: {"model": ErrorResponse, "description": "Session not found"}},
)
async def get_chat_session_messages(
    session_id: Annotated[UUID, Path(description="Chat session ID")], app: AppDep, auth_token: AuthTokenDep
) -> ChatSessionWithMessages:
    return await app.admin_chat_session_messages(auth_token, session_id)
