from __future__ import annotations

from typing import Any, Dict, List, Optional

import numpy as np

try:
    import cv2
except ImportError:  # pragma: no cover
    cv2 = None

from src.segmentation.profiles import NormalizationPolicy


def draw_hud(frame: Any, fps: float, stages_ms: Dict[str, float], warnings: Optional[List[str]] = None):
    """Minimal HUD overlay with FPS and stage timings."""
    if cv2 is None:
        return frame

    render = frame.copy()
    y = 25
    cv2.putText(render, f"BGR | FPS: {fps:5.1f}", (15, y), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 255), 2)
    y += 28

    for name, ms in list(stages_ms.items())[:6]:
        cv2.putText(render, f"{name}: {ms:5.1f} ms", (15, y), cv2.FONT_HERSHEY_SIMPLEX, 0.6, (220, 220, 220), 2)
        y += 22

    if warnings:
        y += 8
        for w in warnings[:3]:
            cv2.putText(render, w, (15, y), cv2.FONT_HERSHEY_SIMPLEX, 0.65, (0, 0, 255), 2)
            y += 24

    return render


def render_mask(mask: np.ndarray, scale: int = 1) -> np.ndarray:
    """{0,1} mask -> BGR image, background white and person black."""
    vis = np.where(mask > 0, 255, 0).astype(np.uint8)
    if scale > 1 and cv2 is not None:
        vis = cv2.resize(vis, (mask.shape[1] * scale, mask.shape[0] * scale), interpolation=cv2.INTER_NEAREST)
    return np.repeat(vis[..., None], 3, axis=2)


def render_model_input(tensor: np.ndarray, policy: NormalizationPolicy) -> np.ndarray:
    """Undo normalization so the model input can be looked at (RGB tensor -> BGR image)."""
    rgb = policy.invert(tensor)
    return np.ascontiguousarray(rgb[..., ::-1])
