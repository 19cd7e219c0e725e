"""Keypoint recording and replay (JSON Lines, one frame per line)."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Generator, List, Optional

from .frame import KeypointFrame

logger = logging.getLogger(__name__)


class KeypointRecorder:
    """Append ``KeypointFrame``s to a JSONL file.

    Lines are buffered and flushed every ``buffer_size`` frames and on close.
    """

    def __init__(self, output_path, buffer_size: int = 100):
        self.output_path = Path(output_path)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.buffer_size = int(buffer_size)
        self._buffer: List[str] = []
        self._file = open(self.output_path, "w")
        self.frame_count = 0
        logger.info(f"Recording keypoints to {self.output_path}")

    def write(self, frame: KeypointFrame) -> None:
        self._buffer.append(json.dumps(frame.to_dict()))
        self.frame_count += 1
        if len(self._buffer) >= self.buffer_size:
            self.flush()

    def flush(self) -> None:
        if self._buffer and self._file is not None:
            self._file.write("\n".join(self._buffer) + "\n")
            self._file.flush()
            self._buffer.clear()

    def close(self) -> None:
        if self._file is None:
            return
        self.flush()
        self._file.close()
        self._file = None
        logger.info(f"Saved {self.frame_count} keypoint frames: {self.output_path}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def read_keypoint_frames(path, limit: Optional[int] = None) -> Generator[KeypointFrame, None, None]:
    """Yield frames from a JSONL recording.

    Blank lines are skipped. A malformed line raises ``ValueError`` naming the
    line number.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Keypoint recording not found: {path}")

    count = 0
    with open(path, "r") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                data = json.loads(line)
                frame = KeypointFrame.from_dict(data)
            except ValueError as e:
                raise ValueError(f"{path}:{line_no}: {e}") from e
            yield frame
            count += 1
            if limit is not None and count >= limit:
                return
