"""History persistence."""

from .history_store import (
    HistoryRecord,
    HistoryStore,
    InMemoryHistoryStore,
    JsonHistoryStore,
)
