from datetime import datetime
from typing import Any
from uuid import UUID

import structlog
from pymongo import ASCENDING, DESCENDING
from pymongo.asynchronous.database import AsyncDatabase

from blogsmith.core.core import Service
from blogsmith.core.modules.history.grouping import compute_totals, daily_usage, group_workflow_sessions
from blogsmith.core.modules.history.models import (
    PREVIEW_LENGTH,
    ApiProvider,
    OperationType,
    RecentActivity,
    RequestMeta,
    SetupStepData,
    UsageInput,
    UsageRecord,
    UsageStats,
    UsageTotals,
    WorkflowSession,
)
from blogsmith.core.pagination import PaginationResult, page_offset
from blogsmith.errors import ValidationError

logger = structlog.get_logger(__name__)

RECENT_ACTIVITY_LIMIT = 10


def content_preview(content: str | None, fallback: str | None = None) -> str | None:
    if not content:
        return fallback
    return content[:PREVIEW_LENGTH]


class HistoryService(Service):
    """Stores and aggregates per-user usage history of workflow steps."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("usage_history")

    async def on_start(self) -> None:
        await self._collection.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
        await self._collection.create_index([("user_id", ASCENDING), ("session_id", ASCENDING)])

    async def record_usage(self, user_id: UUID, usage: UsageInput, meta: RequestMeta | None = None) -> UsageRecord:
        """Persist one workflow step, stamping it with a workflow session id."""
        if not usage.operation_type or not usage.api_provider or not usage.model_id:
            raise ValidationError("Missing required fields")

        data = usage.model_dump()
        data["session_id"] = self.core.services.workflow.resolve_session_id(str(user_id), usage.session_id)
        if meta is not None:
            data.update(meta.model_dump())

        record = UsageRecord(user_id=user_id, **data)
        await self._collection.insert_one(record.to_mongo())
        logger.debug(
            "usage_recorded",
            user_id=user_id,
            session_id=record.session_id,
            operation_type=record.operation_type,
            total_cost_usd=record.total_cost_usd,
        )
        return record

    async def record_setup_progress(
        self,
        user_id: UUID,
        step_number: int | None,
        step_name: str | None,
        step_data: SetupStepData | None,
        session_id: str | None = None,
        meta: RequestMeta | None = None,
    ) -> UsageRecord:
        """Persist a setup wizard step as a zero-cost history record."""
        if not step_number or not step_name:
            raise ValidationError("Missing required fields")

        step_data = step_data or SetupStepData()
        tone = step_data.tone
        references = step_data.references
        usage = UsageInput(
            session_id=session_id,
            operation_type=OperationType.SETUP_PROGRESS,
            api_provider=ApiProvider.NONE,
            model_id="none",
            model_name="none",
            setup_step=step_name,
            step_number=step_number,
            keywords=step_data.keywords,
            blog_type=step_data.blog_type,
            selected_title=step_data.selected_title,
            word_count=step_data.word_count,
            tone_type=tone.type if tone else None,
            tone_subtype=tone.subtype if tone else None,
            temperature=step_data.temperature,
            paragraphs=step_data.paragraphs,
            references_files=[f.name for f in references.files] if references else [],
            references_urls=references.urls if references else [],
            references_custom_text=references.custom_text if references else None,
            pricing_units="none",
            generated_content_preview=f"Setup step: {step_name}",
        )
        return await self.record_usage(user_id, usage, meta)

    async def list_history(
        self,
        user_id: UUID,
        page: int = 1,
        limit: int = 20,
        operation_type: str | None = None,
        api_provider: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> PaginationResult[UsageRecord]:
        """Get user's history newest first with optional filters."""
        query: dict[str, Any] = {"user_id": user_id}
        if operation_type:
            query["operation_type"] = operation_type
        if api_provider:
            query["api_provider"] = api_provider
        created_at: dict[str, datetime] = {}
        if date_from:
            created_at["$gte"] = date_from
        if date_to:
            created_at["$lte"] = date_to
        if created_at:
            query["created_at"] = created_at

        return await self._paginate(query, page, limit)

    async def list_sessions(
        self, user_id: UUID, page: int = 1, limit: int = 10, session_id: str | None = None
    ) -> PaginationResult[WorkflowSession]:
        """Get a page of user's history grouped into workflow sessions.

        Pagination applies to history records, so total counts records, not sessions.
        """
        query: dict[str, Any] = {"user_id": user_id}
        if session_id:
            query["session_id"] = session_id

        records = await self._paginate(query, page, limit)
        return PaginationResult(
            items=group_workflow_sessions(records.items, user_id),
            total=records.total,
            page=page,
            limit=limit,
        )

    async def get_all_history(self, user_id: UUID) -> list[UsageRecord]:
        cursor = self._collection.find({"user_id": user_id}).sort("created_at", DESCENDING)
        return await UsageRecord.list_cursor(cursor)

    async def get_totals(self, user_id: UUID) -> UsageTotals:
        return compute_totals(await self.get_all_history(user_id))

    async def get_stats(self, user_id: UUID) -> UsageStats:
        """Totals, most recent operations, and daily usage for the last 30 days."""
        records = await self.get_all_history(user_id)
        recent = [RecentActivity.model_validate(r.model_dump()) for r in records[:RECENT_ACTIVITY_LIMIT]]
        return UsageStats(
            total_usage=compute_totals(records),
            recent_activity=recent,
            daily_stats=daily_usage(records),
        )

    async def _paginate(self, query: dict[str, Any], page: int, limit: int) -> PaginationResult[UsageRecord]:
        total = await self._collection.count_documents(query)
        cursor = self._collection.find(query).sort("created_at", DESCENDING).skip(page_offset(page, limit)).limit(limit)
        items = await UsageRecord.list_cursor(cursor)
        return PaginationResult(items=items, total=total, page=page, limit=limit)
