from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime
from uuid import UUID

from blogsmith.config import Config
from blogsmith.core.core import Core
from blogsmith.core.modules.admin.models import AdminStatus, UserActivity, UserHistoryReport
from blogsmith.core.modules.chat.models import (
    ChatMessage,
    ChatSession,
    ChatSessionWithMessages,
    ChatSessionWithUser,
    MessageCosts,
    MessageModel,
    MessageRole,
    MessageTokens,
)
from blogsmith.core.modules.history.grouping import compute_totals, history_statistics
from blogsmith.core.modules.history.models import (
    RequestMeta,
    SetupStepData,
    UsageInput,
    UsageRecord,
    UsageStats,
    WorkflowSession,
)
from blogsmith.core.modules.humanize.models import HumanizeResult
from blogsmith.core.modules.llm.models import GeneratedTitles
from blogsmith.core.modules.session.models import AuthToken
from blogsmith.core.modules.user.models import User, UserSummary, UserView
from blogsmith.core.pagination import PaginationResult
from blogsmith.errors import AuthenticationError, ValidationError
from blogsmith.utils import now


class App:
    """Facade for all application operations, validates permissions before delegating to Core."""

    def __init__(self, config: Config) -> None:
        self._core = Core(config)

    @property
    def config(self) -> Config:
        return self._core.config

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    # === Auth ===
    async def is_auth_token_valid(self, auth_token: AuthToken) -> bool:
        """Check if authentication token is valid."""
        return await self._core.services.session.is_auth_token_valid(auth_token)

    async def register(self, email: str, password: str, full_name: str | None) -> UserView:
        """Create a new account awaiting admin approval."""
        user = await self._core.services.user.create_user(email, password, full_name)
        return UserView.from_domain(user)

    async def login(self, email: str, password: str, meta: RequestMeta | None = None) -> AuthToken:
        """Authenticate user and create session."""
        if not self._core.services.user.verify_password(email, password):
            raise AuthenticationError("Invalid email or password")
        user = self._core.services.user.get_user_by_email(email)
        await self._core.services.user.record_sign_in(user.id)
        return await self._core.services.session.create_session(user.id, meta)

    async def logout(self, auth_token: AuthToken) -> None:
        """Invalidate user session."""
        await self._core.services.access.ensure_authenticated(auth_token)
        await self._core.services.session.invalidate_session(auth_token)

    # === Profile ===
    async def get_current_user(self, auth_token: AuthToken) -> UserView:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return UserView.from_domain(current_user)

    async def update_profile(self, auth_token: AuthToken, full_name: str | None, avatar_url: str | None) -> UserView:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        user = await self._core.services.user.update_profile(current_user.id, full_name, avatar_url)
        return UserView.from_domain(user)

    async def change_password(self, auth_token: AuthToken, old_password: str, new_password: str) -> None:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        await self._core.services.user.change_password(current_user.id, old_password, new_password)

    # === Workflow history ===
    async def get_workflow_session(self, auth_token: AuthToken) -> str:
        """Current coalesced workflow session id for the user."""
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return self._core.services.workflow.get_session_id(str(current_user.id))

    async def record_usage(self, auth_token: AuthToken, usage: UsageInput, meta: RequestMeta) -> UsageRecord:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.history.record_usage(current_user.id, usage, meta)

    async def record_setup_progress(
        self,
        auth_token: AuthToken,
        step_number: int | None,
        step_name: str | None,
        step_data: SetupStepData | None,
        session_id: str | None,
        meta: RequestMeta,
    ) -> UsageRecord:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.history.record_setup_progress(
            current_user.id, step_number, step_name, step_data, session_id, meta
        )

    async def get_history(
        self,
        auth_token: AuthToken,
        page: int,
        limit: int,
        operation_type: str | None = None,
        api_provider: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> PaginationResult[UsageRecord]:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.history.list_history(
            current_user.id, page, limit, operation_type, api_provider, date_from, date_to
        )

    async def get_session_history(
        self, auth_token: AuthToken, page: int, limit: int, session_id: str | None = None
    ) -> PaginationResult[WorkflowSession]:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.history.list_sessions(current_user.id, page, limit, session_id)

    async def get_usage_stats(self, auth_token: AuthToken) -> UsageStats:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.history.get_stats(current_user.id)

    # === AI providers ===
    async def generate_titles(
        self, auth_token: AuthToken, keywords: list[str], blog_type: str | None, session_id: str | None, meta: RequestMeta
    ) -> GeneratedTitles:
        """Generate blog titles (approved users only)."""
        current_user = await self._core.services.access.ensure_approved(auth_token)
        return await self._core.services.llm.generate_titles(current_user.id, keywords, blog_type, session_id, meta)

    async def humanize(self, auth_token: AuthToken, text: str, session_id: str | None, meta: RequestMeta) -> HumanizeResult:
        """Humanize text (approved users only)."""
        current_user = await self._core.services.access.ensure_approved(auth_token)
        return await self._core.services.humanize.humanize(current_user.id, text, session_id, meta)

    # === Chat ===
    async def get_chat_sessions(self, auth_token: AuthToken) -> list[ChatSession]:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.chat.list_sessions(current_user.id)

    async def create_chat_session(self, auth_token: AuthToken, title: str | None) -> ChatSession:
        current_user = await self._core.services.access.ensure_approved(auth_token)
        return await self._core.services.chat.create_session(current_user.id, title)

    async def rename_chat_session(self, auth_token: AuthToken, session_id: UUID, title: str) -> ChatSession:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.chat.rename_session(session_id, current_user.id, title)

    async def get_chat_session_messages(self, auth_token: AuthToken, session_id: UUID) -> ChatSessionWithMessages:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        session = await self._core.services.chat.get_session(session_id, current_user.id)
        messages = await self._core.services.chat.get_messages(session_id)
        return ChatSessionWithMessages(session=session, messages=messages)

    async def add_chat_message(
        self,
        auth_token: AuthToken,
        session_id: UUID,
        role: MessageRole,
        content: str,
        model: MessageModel | None,
        api_provider: str | None,
        tokens: MessageTokens | None,
        costs: MessageCosts | None,
    ) -> ChatMessage:
        current_user = await self._core.services.access.ensure_approved(auth_token)
        return await self._core.services.chat.add_message(
            session_id, current_user.id, role, content, model, api_provider, tokens, costs
        )

    # === Admin ===
    async def check_admin(self, auth_token: AuthToken) -> AdminStatus:
        """Report admin and approval flags for the current user (any authenticated user)."""
        user = await self._core.services.access.ensure_authenticated(auth_token)
        return AdminStatus(
            user_id=user.id,
            email=user.email,
            full_name=user.full_name,
            is_admin=user.is_admin,
            is_approved=user.is_approved,
        )

    async def admin_list_users(self, auth_token: AuthToken) -> list[UserView]:
        await self._core.services.access.ensure_admin(auth_token)
        return [UserView.from_domain(user) for user in self._core.services.user.get_all_users()]

    async def admin_set_user_approval(self, auth_token: AuthToken, user_id: UUID, approve: bool) -> UserView:
        await self._core.services.access.ensure_admin(auth_token)
        user = await self._core.services.user.set_approval(user_id, approve)
        return UserView.from_domain(user)

    async def admin_set_user_admin(self, auth_token: AuthToken, user_id: UUID, is_admin: bool) -> UserView:
        """Grant or revoke admin (admin only, cannot revoke self)."""
        current_user = await self._core.services.access.ensure_admin(auth_token)
        if user_id == current_user.id and not is_admin:
            raise ValidationError("Cannot revoke your own admin privileges")
        user = await self._core.services.user.set_admin(user_id, is_admin)
        return UserView.from_domain(user)

    async def admin_users_activity(self, auth_token: AuthToken) -> list[UserActivity]:
        await self._core.services.access.ensure_admin(auth_token)
        result = []
        for user in self._core.services.user.get_all_users():
            usage = await self._core.services.history.get_totals(user.id)
            result.append(UserActivity(**UserView.from_domain(user).model_dump(), usage=usage))
        return result

    async def admin_user_history(self, auth_token: AuthToken, user_id: UUID) -> UserHistoryReport:
        await self._core.services.access.ensure_admin(auth_token)
        user = self._core.services.user.get_user(user_id)
        history = await self._core.services.history.get_all_history(user.id)
        return UserHistoryReport(
            user=UserView.from_domain(user),
            total_usage=compute_totals(history),
            history=history,
            statistics=history_statistics(history),
        )

    async def admin_chat_sessions(
        self, auth_token: AuthToken, user_id: UUID | None = None, limit: int = 50
    ) -> list[ChatSessionWithUser]:
        """Chat sessions of all users or one user, with owner summary (admin only)."""
        await self._core.services.access.ensure_admin(auth_token)
        sessions = await self._core.services.chat.list_sessions(user_id, limit)
        return [ChatSessionWithUser(**s.model_dump(), user=self._user_summary(s.user_id)) for s in sessions]

    async def admin_chat_session_messages(self, auth_token: AuthToken, session_id: UUID) -> ChatSessionWithMessages:
        await self._core.services.access.ensure_admin(auth_token)
        session = await self._core.services.chat.get_session(session_id)
        messages = await self._core.services.chat.get_messages(session_id)
        return ChatSessionWithMessages(session=session, messages=messages, user=self._user_summary(session.user_id))

    # === Status ===
    def get_status(self) -> dict[str, object]:
        """Public service status: which AI providers are configured."""
        config = self._core.config
        return {
            "status": "ok",
            "timestamp": now().isoformat(),
            "llm_configured": bool(config.llm_api_key),
            "humanizer_configured": bool(config.rephrasy_api_key),
            "version": config.git_commit_hash,
        }

    # === Private resolver methods ===
    def _user_summary(self, user_id: UUID) -> UserSummary | None:
        users = self._core.services.user
        if not users.has_user(user_id):
            return None
        user: User = users.get_user(user_id)
        return UserSummary.from_domain(user)
