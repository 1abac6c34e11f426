from __future__ import annotations

from pathlib import Path
from typing import Optional

import numpy as np

try:
    import cv2
except ImportError:  # pragma: no cover
    cv2 = None

from src.utils.logger import get_logger


class VideoOutput:
    """mp4 sink for BGR frames; the writer opens lazily on the first frame's size."""

    def __init__(self, path: str | Path, fps: float = 30.0, fourcc: str = "mp4v"):
        if cv2 is None:
            raise ImportError("opencv-python is required to save video output")
        self.path = Path(path)
        self.fps = float(fps) or 30.0
        self.fourcc = fourcc
        self.logger = get_logger(__name__)
        self.writer = None
        self.size: Optional[tuple] = None
        self.frames_written = 0

    def _open(self, width: int, height: int) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.writer = cv2.VideoWriter(str(self.path), cv2.VideoWriter_fourcc(*self.fourcc), self.fps, (width, height))
        if not self.writer.isOpened():
            raise RuntimeError(f"Could not open VideoWriter ({self.fourcc}). Try a different codec/container.")
        self.size = (width, height)

    def write(self, frame: np.ndarray) -> None:
        height, width = frame.shape[:2]
        if self.writer is None:
            self._open(width, height)
        elif (width, height) != self.size:
            raise ValueError(f"frame size {width}x{height} differs from stream size {self.size[0]}x{self.size[1]}")
        self.writer.write(frame)
        self.frames_written += 1

    def release(self) -> None:
        if self.writer is not None:
            self.writer.release()
            self.writer = None
            self.logger.info("Saved video: %s (%d frames)", self.path, self.frames_written)

    def __enter__(self) -> "VideoOutput":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
