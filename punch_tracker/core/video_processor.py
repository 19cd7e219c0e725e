"""Video and camera frame sources."""

import time
import cv2
import numpy as np
from pathlib import Path
from typing import Generator, Optional, Tuple, Union


class VideoProcessor:
    """Read frames from a video file or a camera with per-frame timestamps.

    Timestamps are seconds: ``frame_idx / fps`` for files, a monotonic clock
    for cameras.
    """

    def __init__(
        self,
        source: Union[str, int],
        mirror: bool = False,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ):
        """
        Initialize frame source.

        Args:
            source: Path to a video file, or a camera index
            mirror: Flip frames horizontally (selfie view)
            width: Requested capture width (cameras only)
            height: Requested capture height (cameras only)
        """
        self.is_camera = isinstance(source, int)
        self.mirror = mirror

        if self.is_camera:
            self.source = source
            self.cap = cv2.VideoCapture(source)
            if width:
                self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
            if height:
                self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
            if not self.cap.isOpened():
                raise ValueError(f"Cannot open camera: {source}")
        else:
            self.source = Path(source)
            if not self.source.exists():
                raise FileNotFoundError(f"Video not found: {source}")
            self.cap = cv2.VideoCapture(str(self.source))
            if not self.cap.isOpened():
                raise ValueError(f"Cannot open video: {source}")

        self.width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        fps = self.cap.get(cv2.CAP_PROP_FPS)
        self.fps = fps if fps and fps > 0 else 30.0
        self.total_frames = 0 if self.is_camera else int(self.cap.get(cv2.CAP_PROP_FRAME_COUNT))

    def release(self):
        if self.cap is not None:
            self.cap.release()
            self.cap = None

    def __del__(self):
        if hasattr(self, 'cap'):
            self.release()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()

    def read_frames(self) -> Generator[Tuple[int, float, np.ndarray], None, None]:
        """
        Generator that yields frames.

        Yields:
            Tuple of (frame_index, timestamp_s, frame)
        """
        frame_idx = 0
        start = time.monotonic()

        while self.cap is not None:
            ret, frame = self.cap.read()
            if not ret:
                break
            if self.mirror:
                frame = cv2.flip(frame, 1)
            timestamp = (time.monotonic() - start) if self.is_camera else frame_idx / self.fps
            yield frame_idx, timestamp, frame
            frame_idx += 1

    @property
    def info(self) -> dict:
        """Get source information."""
        return {
            "source": str(self.source),
            "camera": self.is_camera,
            "width": self.width,
            "height": self.height,
            "fps": self.fps,
            "total_frames": self.total_frames,
        }


class VideoWriter:
    """Write annotated frames to a video file."""

    def __init__(
        self,
        output_path: str,
        width: int,
        height: int,
        fps: float,
        codec: str = "mp4v",
    ):
        self.output_path = Path(output_path)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)

        fourcc = cv2.VideoWriter_fourcc(*codec)
        self.writer = cv2.VideoWriter(str(self.output_path), fourcc, fps, (width, height))
        if not self.writer.isOpened():
            raise ValueError(f"Cannot create video writer: {output_path}")

        self.frame_count = 0

    def write(self, frame: np.ndarray):
        """Write a frame to the video."""
        self.writer.write(frame)
        self.frame_count += 1

    def release(self):
        if self.writer is not None:
            self.writer.release()
            self.writer = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()


class CameraSource(VideoProcessor):
    """Live camera feed, mirrored by default so the user sees a selfie view."""

    def __init__(self, index: int = 0, mirror: bool = True, width: Optional[int] = None, height: Optional[int] = None):
        super().__init__(int(index), mirror=mirror, width=width, height=height)
