from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from src.segmentation.profiles import ModelProfile
from src.utils.errors import ModelShapeError
from src.utils.types import TensorSpec


@dataclass(frozen=True)
class TensorShape:
    """Model geometry negotiated once at startup."""

    input_width: int
    input_height: int
    stride: int
    output_channels: int

    @property
    def mask_width(self) -> int:
        return self.input_width // self.stride

    @property
    def mask_height(self) -> int:
        return self.input_height // self.stride

    @property
    def input_nbytes(self) -> int:
        return self.input_width * self.input_height * 3 * np.dtype(np.float32).itemsize

    @property
    def output_size(self) -> int:
        return self.mask_width * self.mask_height * self.output_channels


def _check(condition: bool, message: str, spec: TensorSpec) -> None:
    if not condition:
        raise ModelShapeError(message, details={"tensor": spec.describe()})


def _check_tensor(spec: TensorSpec, role: str) -> None:
    _check(np.dtype(spec.dtype) == np.float32, f"{role} tensor must be float32", spec)
    _check(spec.ndim == 4, f"{role} tensor must have 4 dimensions", spec)
    _check(spec.shape[0] == 1, f"{role} tensor batch size must be 1", spec)
    _check(all(int(d) > 0 for d in spec.shape[1:3]), f"{role} tensor spatial dims must be positive", spec)


def negotiate_shape(profile: ModelProfile, input_spec: TensorSpec, output_spec: TensorSpec) -> TensorShape:
    """
    Cross-check the profile against the loaded model's NHWC tensors.

    Dimension 1 is read as the width and dimension 2 as the height.
    """
    _check_tensor(input_spec, "input")
    _check(
        input_spec.shape[3] == profile.input_channels,
        f"input tensor must have {profile.input_channels} channels",
        input_spec,
    )
    width, height = int(input_spec.shape[1]), int(input_spec.shape[2])

    _check_tensor(output_spec, "output")
    out_w, out_h = int(output_spec.shape[1]), int(output_spec.shape[2])
    _check(width % out_w == 0, "output tensor width is not a divisor of input tensor width", output_spec)
    stride = width // out_w
    _check(height % out_h == 0, "output tensor height is not a divisor of input tensor height", output_spec)
    _check(height // out_h == stride, "vertical stride doesn't match horizontal stride", output_spec)
    _check(
        profile.accepts_stride(stride),
        f"stride {stride} not valid for {profile.family.value} (expected one of {sorted(profile.valid_strides)})",
        output_spec,
    )
    _check(
        output_spec.shape[3] == profile.output_channels,
        f"output tensor must have {profile.output_channels} channels for {profile.family.value}",
        output_spec,
    )
    return TensorShape(
        input_width=width,
        input_height=height,
        stride=stride,
        output_channels=profile.output_channels,
    )
