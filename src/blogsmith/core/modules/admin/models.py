"""Composite views returned by admin endpoints."""

from uuid import UUID

from pydantic import BaseModel, Field

from blogsmith.core.modules.history.models import HistoryStatistics, UsageRecord, UsageTotals
from blogsmith.core.modules.user.models import UserView


class AdminStatus(BaseModel):
    """Admin and approval flags of the current user."""

    user_id: UUID
    email: str
    full_name: str | None
    is_admin: bool
    is_approved: bool


class UserActivity(UserView):
    usage: UsageTotals = Field(..., description="Usage totals across all history")


class UserHistoryReport(BaseModel):
    user: UserView
    total_usage: UsageTotals
    history: list[UsageRecord] = Field(..., description="Full history, newest first")
    statistics: HistoryStatistics
