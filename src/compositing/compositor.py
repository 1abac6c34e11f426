from __future__ import annotations

import numpy as np

from src.utils.errors import FrameSizeMismatchError


def check_same_size(frame: np.ndarray, replacement: np.ndarray) -> None:
    if frame.shape != replacement.shape:
        raise FrameSizeMismatchError(
            f"frame {frame.shape} and replacement {replacement.shape} differ",
            details={"frame": frame.shape, "replacement": replacement.shape},
        )


def composite(frame: np.ndarray, mask: np.ndarray, replacement: np.ndarray) -> np.ndarray:
    """
    Hard-edged masked copy, in place.

    Args:
        frame: (H, W, 3) uint8, overwritten where mask is set
        mask: (H, W) uint8 {0,1}
        replacement: (H, W, 3) uint8

    Returns:
        frame (the same array)
    """
    check_same_size(frame, replacement)
    if mask.shape != frame.shape[:2]:
        raise FrameSizeMismatchError(
            f"mask {mask.shape} does not cover frame {frame.shape[:2]}",
            details={"frame": frame.shape, "mask": mask.shape},
        )
    np.copyto(frame, replacement, where=mask.astype(bool)[..., None])
    return frame
