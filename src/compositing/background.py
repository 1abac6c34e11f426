from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

import cv2
import numpy as np

from src.utils.logger import get_logger


class BackgroundSelector:
    """
    Serves the replacement background at whatever size the current frame has.

    The source is an image file, or a solid color when no image is given.
    The resized copy for the most recent frame size is cached, so a steady
    stream costs a single resize and a size change replaces the entry.
    """

    def __init__(
        self,
        image_path: Optional[str | Path] = None,
        color: Sequence[int] = (0, 255, 0),
        interpolation: int = cv2.INTER_AREA,
        rgb: bool = True,
    ):
        self.logger = get_logger(__name__)
        self.interpolation = interpolation
        self.color = tuple(int(c) for c in color)
        self.source: Optional[np.ndarray] = None
        self._cache: Dict[Tuple[int, int], np.ndarray] = {}

        if image_path is not None:
            path = Path(image_path)
            if not path.exists():
                raise FileNotFoundError(f"Background image not found: {path}")
            image = cv2.imread(str(path), cv2.IMREAD_COLOR)
            if image is None:
                raise RuntimeError(f"Could not decode background image: {path}")
            self.source = cv2.cvtColor(image, cv2.COLOR_BGR2RGB) if rgb else image
            self.logger.info("Background image: %s (%dx%d)", path, image.shape[1], image.shape[0])
        else:
            self.logger.info("Background color: %s", self.color)

    @classmethod
    def from_array(cls, image: np.ndarray, interpolation: int = cv2.INTER_AREA) -> "BackgroundSelector":
        selector = cls(interpolation=interpolation)
        selector.source = np.array(image, dtype=np.uint8)
        return selector

    def get(self, width: int, height: int) -> np.ndarray:
        """Replacement image shaped (height, width, 3); treat as read-only."""
        key = (width, height)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        if self.source is None:
            image = np.empty((height, width, 3), dtype=np.uint8)
            image[:] = self.color
        elif self.source.shape[:2] == (height, width):
            image = self.source
        else:
            image = cv2.resize(self.source, (width, height), interpolation=self.interpolation)
        image.setflags(write=False)
        self._cache = {key: image}
        return image

    def for_frame(self, frame: np.ndarray) -> np.ndarray:
        return self.get(frame.shape[1], frame.shape[0])
