"""Persistence for the per-limb strike power history.

The score engine only needs a tiny blob: when it was saved and the recent
strike powers of each limb. Stores never raise into the frame loop; failures
are logged and treated as "nothing stored".
"""

from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

HISTORY_FORMAT_VERSION = 1


@dataclass(frozen=True)
class HistoryRecord:
    """Snapshot of both limbs' strike powers."""

    saved_at: float
    left: List[float] = field(default_factory=list)
    right: List[float] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "version": HISTORY_FORMAT_VERSION,
            "saved_at": self.saved_at,
            "left": list(self.left),
            "right": list(self.right),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HistoryRecord":
        """Parse a stored blob.

        Raises:
            ValueError: unknown version or malformed fields.
        """
        version = data.get("version")
        if version != HISTORY_FORMAT_VERSION:
            raise ValueError(f"Unsupported history version: {version!r}")
        try:
            return cls(
                saved_at=float(data["saved_at"]),
                left=[float(v) for v in data.get("left") or []],
                right=[float(v) for v in data.get("right") or []],
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Malformed history record: {e}") from e


class HistoryStore(ABC):
    """get/set interface for the history blob."""

    @abstractmethod
    def load(self) -> Optional[HistoryRecord]:
        """Return the stored record, or None."""
        pass

    @abstractmethod
    def save(self, record: HistoryRecord) -> None:
        """Replace the stored record."""
        pass


class InMemoryHistoryStore(HistoryStore):
    """Keeps the record in process memory (tests, single sessions)."""

    def __init__(self, record: Optional[HistoryRecord] = None):
        self.record = record
        self.save_count = 0

    def load(self) -> Optional[HistoryRecord]:
        return self.record

    def save(self, record: HistoryRecord) -> None:
        self.record = record
        self.save_count += 1


class JsonHistoryStore(HistoryStore):
    """Stores the record as a small JSON file."""

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> Optional[HistoryRecord]:
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
            return HistoryRecord.from_dict(data)
        except (json.JSONDecodeError, IOError, ValueError, AttributeError) as e:
            logger.warning(f"Could not load strike history from {self.path}: {e}")
            return None

    def save(self, record: HistoryRecord) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            with open(tmp_path, "w") as f:
                json.dump(record.to_dict(), f, indent=2)
            os.replace(tmp_path, self.path)
            logger.debug(f"Saved strike history to {self.path}")
        except (IOError, OSError) as e:
            logger.warning(f"Could not save strike history to {self.path}: {e}")
