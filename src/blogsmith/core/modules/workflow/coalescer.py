"""In-process coalescing of a user's workflow steps into one session token."""

import threading
from collections.abc import Callable
from dataclasses import dataclass

from blogsmith.errors import ValidationError
from blogsmith.utils import now_ms

MINUTE_MS = 60_000

TOKEN_PREFIX = "session_"


@dataclass(frozen=True)
class SessionRecord:
    """A minted workflow session token and the moment it was minted."""

    token: str
    user_id: str
    created_at: int  # epoch milliseconds


class SessionCoalescer:
    """Groups a user's consecutive activity under one token within a rolling time window.

    Records live in an insertion-ordered table keyed by token. Expired records are
    ignored by lookups but stay in the table until prune_expired removes them.
    All operations hold one lock, so lookup-then-insert is atomic within a process.
    Separate processes keep independent tables.
    """

    def __init__(self, clock: Callable[[], int] = now_ms) -> None:
        self._clock = clock
        self._records: dict[str, SessionRecord] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, token: object) -> bool:
        return token in self._records

    def mint_token(self, user_id: str) -> str:
        """Build a new token for user_id stamped with the current time."""
        _require_user_id(user_id)
        return _format_token(user_id, self._clock())

    def get_or_create(self, user_id: str, window_minutes: float = 30) -> str:
        """Return the user's token younger than window_minutes, minting one if none is."""
        _require_user_id(user_id)
        _require_positive("window_minutes", window_minutes)
        window_ms = window_minutes * MINUTE_MS

        with self._lock:
            now = self._clock()
            for record in self._records.values():
                if record.user_id == user_id and now - record.created_at < window_ms:
                    return record.token

            record = SessionRecord(token=_format_token(user_id, now), user_id=user_id, created_at=now)
            self._records[record.token] = record
            return record.token

    def prune_expired(self, max_age_minutes: float = 60) -> int:
        """Remove records older than max_age_minutes and return how many were removed."""
        _require_positive("max_age_minutes", max_age_minutes)
        max_age_ms = max_age_minutes * MINUTE_MS

        with self._lock:
            now = self._clock()
            expired = [token for token, record in self._records.items() if now - record.created_at > max_age_ms]
            for token in expired:
                del self._records[token]
            return len(expired)

    def records(self) -> list[SessionRecord]:
        """Snapshot of held records in insertion order."""
        with self._lock:
            return list(self._records.values())


def _format_token(user_id: str, timestamp: int) -> str:
    return f"{TOKEN_PREFIX}{user_id}_{timestamp}"


def _require_user_id(user_id: str) -> None:
    if not user_id:
        raise ValidationError("User id is required to build a workflow session")


def _require_positive(name: str, value: float) -> None:
    if value <= 0:
        raise ValidationError(f"{name} must be positive")
