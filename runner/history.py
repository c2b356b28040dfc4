"""In-memory run history: a bounded, newest-first ring buffer (session only)."""

from __future__ import annotations

from collections import deque
from typing import Any, Deque, Dict, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict

DEFAULT_CAPACITY = 10


class RunHistoryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    actor_name: str
    timestamp_iso: str
    duration_ms: Optional[float] = None
    status: str


class RunHistory:
    """
    Append-only; once `capacity` is reached the oldest entry falls off.
    Iteration yields newest first.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("history capacity must be >= 1")
        self.capacity = capacity
        self._rows: Deque[RunHistoryEntry] = deque(maxlen=capacity)

    def append(self, entry: RunHistoryEntry) -> None:
        self._rows.appendleft(entry)

    def latest(self) -> Optional[RunHistoryEntry]:
        return self._rows[0] if self._rows else None

    def clear(self) -> None:
        self._rows.clear()

    def __iter__(self) -> Iterator[RunHistoryEntry]:
        return iter(list(self._rows))

    def __len__(self) -> int:
        return len(self._rows)

    def entries(self) -> List[RunHistoryEntry]:
        return list(self._rows)

    def as_rows(self) -> List[Dict[str, Any]]:
        return [e.model_dump() for e in self._rows]
