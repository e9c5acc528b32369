"""Pure aggregation over usage history records."""

from collections.abc import Iterable, Sequence
from datetime import timedelta
from uuid import UUID

from blogsmith.core.modules.history.models import (
    ApiProvider,
    DailyUsage,
    HistoryStatistics,
    OperationType,
    UsageRecord,
    UsageTotals,
    WorkflowSession,
    WorkflowStep,
)
from blogsmith.utils import now, to_ms

# Records saved without a session id fall into 30 minute buckets
FALLBACK_BUCKET_MS = 30 * 60 * 1000

# Inputs copied from steps onto their workflow session; a later non-empty value replaces an earlier one
SESSION_INPUT_FIELDS = (
    "keywords",
    "blog_type",
    "selected_title",
    "word_count",
    "tone_type",
    "tone_subtype",
    "temperature",
    "paragraphs",
    "references_files",
    "references_urls",
    "references_custom_text",
)


def fallback_session_id(user_id: UUID, record: UsageRecord) -> str:
    return f"session_{user_id}_{to_ms(record.created_at) // FALLBACK_BUCKET_MS}"


def group_workflow_sessions(records: Iterable[UsageRecord], user_id: UUID) -> list[WorkflowSession]:
    """Group records by session id.

    A session is dated by its most recent record. Steps inside a session and the
    sessions themselves are ordered oldest first.
    """
    ordered = sorted(records, key=lambda r: r.created_at)
    sessions: dict[str, WorkflowSession] = {}

    for record in ordered:
        session_id = record.session_id or fallback_session_id(user_id, record)
        session = sessions.get(session_id)
        if session is None:
            session = WorkflowSession(session_id=session_id, created_at=record.created_at)
            sessions[session_id] = session
        session.created_at = record.created_at

        for field in SESSION_INPUT_FIELDS:
            value = getattr(record, field)
            if value:
                setattr(session, field, value)

        session.steps.append(WorkflowStep.model_validate(record.model_dump()))
        session.total_cost_usd += record.total_cost_usd
        session.total_cost_inr += record.total_cost_inr
        session.total_tokens += record.total_tokens

    return sorted(sessions.values(), key=lambda s: s.created_at)


def compute_totals(records: Iterable[UsageRecord]) -> UsageTotals:
    totals = UsageTotals()
    for record in records:
        totals.total_operations += 1
        totals.total_input_tokens += record.input_tokens
        totals.total_output_tokens += record.output_tokens
        totals.total_cost_usd += record.total_cost_usd
        totals.total_cost_inr += record.total_cost_inr
        if record.api_provider == ApiProvider.OPENAI:
            totals.openai_operations += 1
        elif record.api_provider == ApiProvider.TOGETHER:
            totals.together_operations += 1
        elif record.api_provider == ApiProvider.REPHRASY:
            totals.rephrasy_operations += 1
        if record.operation_type == OperationType.HUMANIZE:
            totals.humanize_operations += 1
    return totals


def daily_usage(records: Iterable[UsageRecord], days: int = 30) -> list[DailyUsage]:
    """Per-day usage for records newer than `days` days, oldest day first."""
    since = now() - timedelta(days=days)
    by_date: dict[str, DailyUsage] = {}

    for record in sorted(records, key=lambda r: r.created_at):
        if record.created_at < since:
            continue
        date = record.created_at.date().isoformat()
        day = by_date.setdefault(date, DailyUsage(date=date))
        day.total_cost += record.total_cost_usd
        day.operations += 1
        if record.api_provider == ApiProvider.OPENAI:
            day.openai_operations += 1
        elif record.api_provider == ApiProvider.TOGETHER:
            day.together_operations += 1
        elif record.api_provider == ApiProvider.REPHRASY:
            day.rephrasy_operations += 1

    return list(by_date.values())


def history_statistics(records: Sequence[UsageRecord]) -> HistoryStatistics:
    return HistoryStatistics(
        total_sessions=len({r.session_id for r in records}),
        unique_operations=list(dict.fromkeys(r.operation_type for r in records)),
        unique_providers=list(dict.fromkeys(r.api_provider for r in records)),
        total_history_entries=len(records),
    )
