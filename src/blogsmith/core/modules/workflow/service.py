import asyncio
import contextlib
from typing import Any

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from blogsmith.core.core import Service
from blogsmith.core.modules.workflow.coalescer import SessionCoalescer

logger = structlog.get_logger(__name__)


class WorkflowService(Service):
    """Owns the process-wide workflow session coalescer and its prune schedule."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self.coalescer = SessionCoalescer()
        self._prune_task: asyncio.Task[None] | None = None

    async def on_start(self) -> None:
        interval = self.core.config.workflow_prune_interval_seconds
        if interval > 0:
            self._prune_task = asyncio.create_task(self._prune_periodically(interval))
        logger.debug("workflow_service_started", prune_interval_seconds=interval)

    async def on_stop(self) -> None:
        if self._prune_task is not None:
            self._prune_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._prune_task
            self._prune_task = None

    def get_session_id(self, user_id: str) -> str:
        """Workflow session id to stamp on the user's next history record."""
        return self.coalescer.get_or_create(user_id, self.core.config.workflow_window_minutes)

    def resolve_session_id(self, user_id: str, session_id: str | None) -> str:
        """Use the client-supplied session id when present, else the coalesced one."""
        return session_id or self.get_session_id(user_id)

    def prune(self) -> int:
        removed = self.coalescer.prune_expired(self.core.config.workflow_max_age_minutes)
        if removed:
            logger.debug("workflow_sessions_pruned", removed=removed, remaining=len(self.coalescer))
        return removed

    async def _prune_periodically(self, interval: int) -> None:
        while True:
            await asyncio.sleep(interval)
            self.prune()
