from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Generator, Optional, Tuple

try:
    import cv2
except ImportError:  # pragma: no cover
    cv2 = None

from src.inputs.base_input import BaseInput
from src.utils.logger import get_logger
from src.utils.types import FramePacket


@dataclass
class VideoMeta:
    fps: float
    width: int
    height: int
    frame_count: int


def parse_source(source: str | int | Path) -> str | int:
    """Camera indices arrive from the CLI as digit strings."""
    if isinstance(source, int):
        return source
    text = str(source)
    return int(text) if text.isdigit() else text


class VideoInput(BaseInput):
    """Frames from a video file or a camera, BGR as OpenCV decodes them."""

    def __init__(
        self,
        source: str | int | Path,
        allow_missing: bool = False,
        frame_rate: Optional[int] = None,
        max_frames: Optional[int] = None,
    ):
        self.source = parse_source(source)
        self.is_camera = isinstance(self.source, int)
        self.path = None if self.is_camera else Path(self.source)
        self.logger = get_logger(__name__)
        self.frame_rate = frame_rate
        self.max_frames = max_frames
        self.cap = None
        self.meta: Optional[VideoMeta] = None
        self.allow_missing = allow_missing

        if cv2 is None:
            if allow_missing:
                self.logger.warning("OpenCV not available; VideoInput will stay inert.")
                return
            raise ImportError("opencv-python is required for VideoInput")

        if self.path is not None and not self.path.exists():
            if allow_missing:
                self.logger.warning("Video %s not found; proceeding inert for testing.", self.path)
                return
            raise FileNotFoundError(f"Video not found: {self.path}")

        self.cap = cv2.VideoCapture(self.source if self.is_camera else str(self.path))
        if not self.cap.isOpened():
            if allow_missing:
                self.logger.warning("Could not open %s; proceeding inert for testing.", self.describe())
                self.cap = None
                return
            raise RuntimeError(f"Could not open video: {self.describe()}")

        self.meta = VideoMeta(
            fps=float(self.cap.get(cv2.CAP_PROP_FPS) or (frame_rate or 30.0)),
            width=int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            height=int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
            frame_count=int(self.cap.get(cv2.CAP_PROP_FRAME_COUNT) or 0),
        )
        self.logger.info(
            "Video opened: %s fps=%.2f size=%dx%d frames=%d",
            self.describe(),
            self.meta.fps,
            self.meta.width,
            self.meta.height,
            self.meta.frame_count,
        )

    def describe(self) -> str:
        return f"camera {self.source}" if self.is_camera else str(self.path)

    @property
    def total_frames(self) -> Optional[int]:
        total = self.meta.frame_count if self.meta and self.meta.frame_count > 0 else None
        if self.max_frames:
            return min(total, self.max_frames) if total else self.max_frames
        return total

    def start(self) -> None:
        # Initialization handled in __init__
        return

    def frames(self) -> Generator[Tuple[int, FramePacket], None, None]:
        if self.cap is None:
            return
        fps = self.meta.fps if self.meta else (self.frame_rate or 30)
        idx = 0
        while self.max_frames is None or idx < self.max_frames:
            ok, frame = self.cap.read()
            if not ok:
                break
            idx += 1
            yield idx, FramePacket(frame=frame, timestamp=idx / fps, index=idx, source=self.describe())

    def stop(self) -> None:
        if self.cap:
            self.cap.release()
            self.cap = None
            self.logger.info("Closed video %s", self.describe())
