from __future__ import annotations

from typing import Tuple

import cv2
import numpy as np

from src.segmentation.preprocess import DEFAULT_INTERPOLATION
from src.segmentation.profiles import ModelProfile
from src.segmentation.shapes import TensorShape
from src.utils.errors import ModelShapeError

BACKGROUND = 1
FOREGROUND = 0


def _as_grid(output: np.ndarray, shape: TensorShape) -> np.ndarray:
    if output.size != shape.output_size:
        raise ModelShapeError(
            f"output buffer has {output.size} values, expected "
            f"{shape.mask_width}x{shape.mask_height}x{shape.output_channels}={shape.output_size}"
        )
    # Output rows follow the mask's row-major order regardless of the tensor's own dim labels.
    return np.asarray(output, dtype=np.float32).reshape(shape.mask_height, shape.mask_width, shape.output_channels)


def _to_mask(background: np.ndarray, shape: TensorShape) -> np.ndarray:
    mask = np.zeros((shape.mask_height, shape.mask_width), dtype=np.uint8)
    mask[background] = BACKGROUND
    return mask


def decode_mask(output: np.ndarray, profile: ModelProfile, shape: TensorShape) -> np.ndarray:
    """
    Convert a raw output tensor into a low-resolution binary mask.

    Multi-class profiles mark every pixel whose arg-max class is not the
    person class; probability profiles mark every pixel strictly below the
    threshold. Each pixel is decided independently, so the whole grid is
    handled in one vectorised pass.

    Returns:
        (mask_height, mask_width) uint8 mask {0,1}, 1 = replace with background
    """
    return _to_mask(profile.background_mask(_as_grid(output, shape)), shape)


def upsample_mask(
    mask: np.ndarray,
    size: Tuple[int, int],
    interpolation: int = DEFAULT_INTERPOLATION,
) -> np.ndarray:
    """
    Args:
        mask: (h, w) uint8 {0,1}
        size: (width, height) of the target frame

    Returns:
        (height, width) uint8 mask {0,1}
    """
    width, height = size
    if mask.shape[1] == width and mask.shape[0] == height:
        return mask.copy()
    up = cv2.resize(mask, (width, height), interpolation=interpolation)
    # Cubic and Lanczos can overshoot past 1 on hard edges.
    return np.minimum(up, BACKGROUND)
