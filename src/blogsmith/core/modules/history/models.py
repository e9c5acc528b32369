from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from blogsmith.core.db import MongoModel
from blogsmith.utils import now

PREVIEW_LENGTH = 500


class OperationType(StrEnum):
    """Kinds of workflow steps recorded in usage history."""

    TITLE_GENERATION = "title_generation"
    BLOG_GENERATION = "blog_generation"
    CONTENT_STRUCTURE = "content_structure"
    HUMANIZE = "humanize"
    SETUP_PROGRESS = "setup_progress"
    CHAT = "chat"


class ApiProvider(StrEnum):
    OPENAI = "openai"
    TOGETHER = "together"
    REPHRASY = "rephrasy"
    NONE = "none"


class UsageInput(BaseModel):
    """Fields a client may report for one workflow step."""

    session_id: str | None = None
    operation_type: str | None = None
    api_provider: str | None = None
    model_id: str | None = None
    model_name: str | None = None
    keywords: list[str] = []
    blog_type: str | None = None
    selected_title: str | None = None
    word_count: str | None = None
    tone_type: str | None = None
    tone_subtype: str | None = None
    temperature: float | None = None
    paragraphs: str | None = None
    references_files: list[str] = []
    references_urls: list[str] = []
    references_custom_text: str | None = None
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    input_price_per_token: float = 0
    output_price_per_token: float = 0
    pricing_units: str | None = None
    input_cost_usd: float = 0
    output_cost_usd: float = 0
    total_cost_usd: float = 0
    total_cost_inr: float = 0
    generated_content_full: str | None = None
    generated_content_preview: str | None = None
    content_length: int = 0
    all_generated_titles: list[str] = []
    setup_step: str | None = None
    step_number: int | None = None


class UsageRecord(MongoModel, UsageInput):
    """Persisted usage history entry.

    Indexed on (user_id, created_at desc), (user_id, session_id).
    """

    user_id: UUID
    session_id: str
    operation_type: str
    api_provider: str
    model_id: str
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime = Field(default_factory=now)


class RequestMeta(BaseModel):
    """Client details captured with each history record."""

    ip_address: str | None = None
    user_agent: str | None = None


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Tone(_CamelModel):
    type: str | None = None
    subtype: str | None = None


class ReferenceFile(_CamelModel):
    name: str


class References(_CamelModel):
    files: list[ReferenceFile] = []
    urls: list[str] = []
    custom_text: str | None = None


class SetupStepData(_CamelModel):
    """Inputs collected by the setup wizard so far."""

    keywords: list[str] = []
    blog_type: str | None = None
    selected_title: str | None = None
    word_count: str | None = None
    tone: Tone | None = None
    temperature: float | None = None
    paragraphs: str | None = None
    references: References | None = None
    api_provider: str | None = None
    model: str | None = None


class UsageTotals(BaseModel):
    """Aggregated usage counters for one user."""

    total_operations: int = 0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    total_cost_usd: float = 0
    total_cost_inr: float = 0
    openai_operations: int = 0
    together_operations: int = 0
    rephrasy_operations: int = 0
    humanize_operations: int = 0


class DailyUsage(BaseModel):
    date: str = Field(..., description="UTC day, YYYY-MM-DD")
    total_cost: float = 0
    operations: int = 0
    openai_operations: int = 0
    together_operations: int = 0
    rephrasy_operations: int = 0


class RecentActivity(BaseModel):
    operation_type: str
    api_provider: str
    model_name: str | None
    total_cost_usd: float
    created_at: datetime
    generated_content_preview: str | None


class UsageStats(BaseModel):
    total_usage: UsageTotals
    recent_activity: list[RecentActivity]
    daily_stats: list[DailyUsage]


class WorkflowStep(BaseModel):
    """One history record as shown inside a grouped workflow session."""

    id: UUID
    operation_type: str
    api_provider: str
    model_name: str | None
    created_at: datetime
    keywords: list[str]
    blog_type: str | None
    selected_title: str | None
    word_count: str | None
    tone_type: str | None
    tone_subtype: str | None
    temperature: float | None
    paragraphs: str | None
    input_tokens: int
    output_tokens: int
    total_tokens: int
    total_cost_usd: float
    total_cost_inr: float
    generated_content_full: str | None
    generated_content_preview: str | None
    content_length: int
    all_generated_titles: list[str]
    references_files: list[str]
    references_urls: list[str]
    references_custom_text: str | None
    setup_step: str | None
    step_number: int | None


class WorkflowSession(BaseModel):
    """History records sharing one session id, with the inputs they collected."""

    session_id: str
    created_at: datetime
    steps: list[WorkflowStep] = []
    total_cost_usd: float = 0
    total_cost_inr: float = 0
    total_tokens: int = 0
    keywords: list[str] = []
    blog_type: str | None = None
    selected_title: str | None = None
    word_count: str | None = None
    tone_type: str | None = None
    tone_subtype: str | None = None
    temperature: float | None = None
    paragraphs: str | None = None
    references_files: list[str] = []
    references_urls: list[str] = []
    references_custom_text: str | None = None


class HistoryStatistics(BaseModel):
    total_sessions: int
    unique_operations: list[str]
    unique_providers: list[str]
    total_history_entries: int
