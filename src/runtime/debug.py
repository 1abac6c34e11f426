from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

import numpy as np

try:
    import cv2
except ImportError:  # pragma: no cover
    cv2 = None

from src.utils.config import get
from src.utils.logger import get_logger
from src.visualization.overlay import render_mask, render_model_input


@dataclass(frozen=True)
class DebugFlags:
    """Which intermediate buffers to visualize; passed in explicitly, never global."""

    show_output_frame: bool = False
    show_model_input_frame: bool = False
    show_model_output: bool = False

    @classmethod
    def parse(cls, text: Optional[str]) -> "DebugFlags":
        """``"show_output_frame,show_model_output"`` -> DebugFlags; empty string -> no flags."""
        known = {f.name for f in fields(cls)}
        names = [n.strip() for n in (text or "").split(",") if n.strip()]
        unknown = [n for n in names if n not in known]
        if unknown:
            raise ValueError(f"Unknown debug flags {unknown} (expected some of {sorted(known)})")
        return cls(**{n: True for n in names})

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "DebugFlags":
        return cls(**{f.name: bool(get(cfg, f"debug.{f.name}", False)) for f in fields(cls)})

    def any(self) -> bool:
        return any(getattr(self, f.name) for f in fields(self))


class DebugViewer:
    """Shows the buffers selected by DebugFlags in OpenCV windows."""

    QUIT_KEYS = (27, ord("q"))

    def __init__(self, flags: DebugFlags, window_prefix: str = "bgr"):
        self.flags = flags
        self.window_prefix = window_prefix
        self.logger = get_logger(__name__)
        self.enabled = flags.any() and cv2 is not None
        if flags.any() and cv2 is None:
            self.logger.warning("OpenCV not available; debug views disabled.")

    def views(self, output_bgr: np.ndarray, remover: Any) -> Dict[str, np.ndarray]:
        views: Dict[str, np.ndarray] = {}
        if self.flags.show_output_frame:
            views["output"] = output_bgr
        if self.flags.show_model_input_frame and remover.last_input is not None:
            views["model_input"] = render_model_input(remover.last_input, remover.profile.normalization)
        if self.flags.show_model_output and remover.last_mask is not None:
            views["model_output"] = render_mask(remover.last_mask)
        return views

    def show(self, output_bgr: np.ndarray, remover: Any) -> bool:
        """Returns False once the user asks to quit from a debug window."""
        if not self.enabled:
            return True
        for name, image in self.views(output_bgr, remover).items():
            cv2.imshow(f"{self.window_prefix}: {name}", image)
        return (cv2.waitKey(1) & 0xFF) not in self.QUIT_KEYS

    def close(self) -> None:
        if self.enabled:
            cv2.destroyAllWindows()
