from __future__ import annotations

from typing import Tuple

import cv2
import numpy as np

from src.segmentation.profiles import NormalizationPolicy, ModelProfile
from src.segmentation.shapes import TensorShape
from src.utils.errors import NormalizationRangeError

# Shared by input downsampling and mask upsampling so mask edges line up with the model input.
DEFAULT_INTERPOLATION = cv2.INTER_LINEAR

INTERPOLATION_METHODS = {
    "nearest": cv2.INTER_NEAREST,
    "linear": cv2.INTER_LINEAR,
    "cubic": cv2.INTER_CUBIC,
    "area": cv2.INTER_AREA,
    "lanczos": cv2.INTER_LANCZOS4,
}


def parse_interpolation(name: str | int | None) -> int:
    if name is None:
        return DEFAULT_INTERPOLATION
    if isinstance(name, int):
        return name
    try:
        return INTERPOLATION_METHODS[str(name).lower()]
    except KeyError:
        raise ValueError(f"Unknown interpolation {name!r} (expected one of {sorted(INTERPOLATION_METHODS)})") from None


def resize_to_input(frame: np.ndarray, shape: TensorShape, interpolation: int = DEFAULT_INTERPOLATION) -> np.ndarray:
    return cv2.resize(frame, (shape.input_width, shape.input_height), interpolation=interpolation)


def check_values_in_range(tensor: np.ndarray, value_range: Tuple[float, float]) -> None:
    low, high = value_range
    tmin, tmax = float(tensor.min()), float(tensor.max())
    if tmin < low or tmax > high:
        raise NormalizationRangeError(
            f"normalized values [{tmin:.4f}, {tmax:.4f}] outside [{low}, {high}]",
            details={"min": tmin, "max": tmax, "range": value_range},
        )


def normalize(image: np.ndarray, policy: NormalizationPolicy, debug_checks: bool = __debug__) -> np.ndarray:
    tensor = policy.apply(image)
    if debug_checks:
        check_values_in_range(tensor, policy.value_range)
    return tensor


def preprocess(
    frame: np.ndarray,
    profile: ModelProfile,
    shape: TensorShape,
    interpolation: int = DEFAULT_INTERPOLATION,
    debug_checks: bool = __debug__,
) -> np.ndarray:
    """
    Args:
        frame: (H, W, 3) uint8, any resolution

    Returns:
        (input_height, input_width, 3) float32, C-contiguous, ready to be
        copied byte-for-byte into the model's input tensor
    """
    small = resize_to_input(frame, shape, interpolation)
    tensor = normalize(small, profile.normalization, debug_checks=debug_checks)
    return np.ascontiguousarray(tensor, dtype=np.float32)
