from __future__ import annotations

from typing import Any, Dict, List, Optional

try:
    import cv2
except ImportError:  # pragma: no cover
    cv2 = None

import numpy as np

from src.compositing.background import BackgroundSelector
from src.runtime.background_remover import BackgroundRemover
from src.runtime.debug import DebugFlags, DebugViewer
from src.runtime.health_monitor import HealthMonitor
from src.utils.config import get
from src.utils.timing import FPSMeter, StageTimer
from src.utils.types import FrameResult
from src.visualization.overlay import draw_hud


def background_from_config(cfg: Dict[str, Any]) -> BackgroundSelector:
    return BackgroundSelector(
        image_path=get(cfg, "background.image"),
        color=get(cfg, "background.color", (0, 255, 0)),
    )


class Orchestrator:
    """
    Per-frame driver around BackgroundRemover: BGR/RGB conversion at the
    edges, background lookup, stage timings, FPS, latency watchdog, HUD and
    debug views.
    """

    def __init__(
        self,
        cfg: Dict[str, Any],
        logger,
        remover: Optional[BackgroundRemover] = None,
        background: Optional[BackgroundSelector] = None,
        debug_flags: Optional[DebugFlags] = None,
    ):
        if cv2 is None:
            raise ImportError("opencv-python is required for orchestrator processing")
        self.cfg = cfg
        self.logger = logger
        self.fps_meter = FPSMeter(smoothing=float(get(cfg, "performance.fps_smoothing", 0.9)))
        self.health = HealthMonitor(cfg.get("runtime", {}))
        self.remover = remover or BackgroundRemover.from_config(cfg)
        self.background = background or background_from_config(cfg)
        self.debug_flags = debug_flags if debug_flags is not None else DebugFlags.from_config(cfg)
        self.viewer = DebugViewer(self.debug_flags)
        self.hud_enabled = bool(get(cfg, "runtime.overlay.enabled", False))

        resize_cfg = get(cfg, "video.resize", {}) or {}
        self.resize_enabled = bool(resize_cfg.get("enabled", False))
        self.resize_w = int(resize_cfg.get("width", 1280))
        self.resize_h = int(resize_cfg.get("height", 720))
        self.stop_requested = False

    def process_frame(self, frame_id: int, frame: np.ndarray) -> FrameResult:
        """
        Args:
            frame: BGR frame as decoded by OpenCV

        Returns:
            FrameResult whose ``frame`` is the composited BGR image
        """
        warnings: List[str] = []
        timer = StageTimer()

        with timer.stage("convert"):
            if self.resize_enabled:
                frame = cv2.resize(frame, (self.resize_w, self.resize_h), interpolation=cv2.INTER_LINEAR)
            rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            replacement = self.background.for_frame(rgb)

        self.remover.process_frame(rgb, replacement, timer)
        render = cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)

        fps = self.fps_meter.tick()
        if not self.health.check_latency(timer.stages_ms.get("inference")):
            warnings.append(f"WARNING: inference over {self.health.budget_ms:.0f} ms budget")

        mask = self.remover.last_frame_mask
        background_ratio = float(mask.mean()) if mask is not None else None

        if self.hud_enabled:
            render = draw_hud(render, fps, timer.stages_ms, warnings)

        if not self.viewer.show(render, self.remover):
            self.logger.info("Quit requested from debug window at frame %d", frame_id)
            self.stop_requested = True

        return FrameResult(
            frame_id=frame_id,
            frame=render,
            fps=fps,
            stages_ms=dict(timer.stages_ms),
            background_ratio=background_ratio,
            warnings=warnings,
        )

    def close(self) -> None:
        self.viewer.close()
        self.remover.close()
