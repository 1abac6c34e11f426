"""
Model profiles: everything that depends on the segmentation model family.

A profile fixes how the input is normalized, how the raw output tensor is
decoded into a background mask, and which output strides the family can
produce. New families are added by registering another profile, the
pipeline itself never branches on the family.
"""
from __future__ import annotations

import abc
import enum
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Tuple

import numpy as np

from src.utils.errors import ModelConfigError

# PASCAL VOC label order used by the DeepLabV3 TFLite export.
DEEPLABV3_LABELS: Tuple[str, ...] = (
    "background", "aeroplane", "bicycle", "bird", "board", "bottle", "bus",
    "car", "cat", "chair", "cow", "diningtable", "dog", "horse",
    "motorbike", "person", "pottedplant", "sheep", "sofa", "train", "tv",
)

# Provisional values; both can be overridden per profile and from config.
PERSON_CLASS_INDEX = 15
PERSON_THRESHOLD = 0.5

INPUT_CHANNELS = 3


class ModelFamily(str, enum.Enum):
    DEEPLABV3 = "deeplabv3"
    BODYPIX_RESNET = "bodypix_resnet"
    BODYPIX_MOBILENET = "bodypix_mobilenet"

    @classmethod
    def parse(cls, identifier: str) -> "ModelFamily":
        try:
            return cls(identifier)
        except ValueError:
            known = ", ".join(f.value for f in cls)
            raise ModelConfigError(
                f"Invalid model type {identifier!r} (expected one of: {known})",
                details={"model_family": identifier},
            ) from None


@dataclass(frozen=True)
class NormalizationPolicy:
    """Per-channel affine transform ``out = in / divisor + offset[c]``."""

    name: str
    divisor: float
    offset: Tuple[float, float, float]
    value_range: Tuple[float, float]

    def apply(self, image: np.ndarray) -> np.ndarray:
        # Computed in float64 so 0 and 255 land exactly on the range ends.
        out = image.astype(np.float64) / self.divisor + np.asarray(self.offset, dtype=np.float64)
        return out.astype(np.float32)

    def invert(self, tensor: np.ndarray) -> np.ndarray:
        """Map a normalized tensor back to uint8 pixels (debug views only)."""
        restored = (tensor.astype(np.float64) - np.asarray(self.offset, dtype=np.float64)) * self.divisor
        return np.clip(np.rint(restored), 0, 255).astype(np.uint8)


SYMMETRIC_RESCALE = NormalizationPolicy(
    name="symmetric_rescale",
    divisor=255.0,
    offset=(-0.5, -0.5, -0.5),
    value_range=(-0.5, 0.5),
)

# https://github.com/tensorflow/tfjs-models/blob/master/body-pix/src/resnet.ts#L22
MEAN_SUBTRACTION = NormalizationPolicy(
    name="mean_subtraction",
    divisor=1.0,
    offset=(-123.15, -115.90, -103.06),
    value_range=(-127.0, 255.0),
)


@dataclass(frozen=True)
class ModelProfile(abc.ABC):
    family: ModelFamily
    output_channels: int
    valid_strides: FrozenSet[int]
    normalization: NormalizationPolicy
    input_channels: int = INPUT_CHANNELS

    def accepts_stride(self, stride: int) -> bool:
        return stride in self.valid_strides

    @abc.abstractmethod
    def background_mask(self, output: np.ndarray) -> np.ndarray:
        """
        Input:
            output: (h, w, output_channels) raw scores
        Output:
            (h, w) bool, True where the pixel is background
        """
        raise NotImplementedError


@dataclass(frozen=True)
class MultiClassProfile(ModelProfile):
    """Per-pixel class-score vector; everything that is not a person is background."""

    labels: Tuple[str, ...] = DEEPLABV3_LABELS
    person_index: int = PERSON_CLASS_INDEX

    def __post_init__(self):
        if not 0 <= self.person_index < self.output_channels:
            raise ModelConfigError(
                f"person class index {self.person_index} outside [0, {self.output_channels})"
            )

    @property
    def person_label(self) -> str:
        return self.labels[self.person_index]

    def background_mask(self, output: np.ndarray) -> np.ndarray:
        # np.argmax keeps the first maximum, so ties go to the lowest class index.
        return np.argmax(output, axis=-1) != self.person_index


@dataclass(frozen=True)
class ProbabilityScalarProfile(ModelProfile):
    """Single-channel person probability; anything strictly below threshold is background."""

    threshold: float = PERSON_THRESHOLD

    def background_mask(self, output: np.ndarray) -> np.ndarray:
        return output[..., 0] < np.float32(self.threshold)


def _deeplabv3(**overrides) -> ModelProfile:
    return MultiClassProfile(
        family=ModelFamily.DEEPLABV3,
        output_channels=len(DEEPLABV3_LABELS),
        valid_strides=frozenset({1}),
        normalization=SYMMETRIC_RESCALE,
        person_index=int(overrides.get("person_class_index", PERSON_CLASS_INDEX)),
    )


def _bodypix_resnet(**overrides) -> ModelProfile:
    return ProbabilityScalarProfile(
        family=ModelFamily.BODYPIX_RESNET,
        output_channels=1,
        valid_strides=frozenset({16, 32}),
        normalization=MEAN_SUBTRACTION,
        threshold=float(overrides.get("threshold", PERSON_THRESHOLD)),
    )


def _bodypix_mobilenet(**overrides) -> ModelProfile:
    return ProbabilityScalarProfile(
        family=ModelFamily.BODYPIX_MOBILENET,
        output_channels=1,
        valid_strides=frozenset({8, 16}),
        normalization=SYMMETRIC_RESCALE,
        threshold=float(overrides.get("threshold", PERSON_THRESHOLD)),
    )


PROFILE_FACTORIES: Dict[ModelFamily, Callable[..., ModelProfile]] = {
    ModelFamily.DEEPLABV3: _deeplabv3,
    ModelFamily.BODYPIX_RESNET: _bodypix_resnet,
    ModelFamily.BODYPIX_MOBILENET: _bodypix_mobilenet,
}


def resolve_profile(identifier: str | ModelFamily, **overrides) -> ModelProfile:
    """
    Build the profile for a model family name.

    Recognized overrides: ``person_class_index`` (multi-class families) and
    ``threshold`` (probability families). ``None`` values are ignored.
    """
    family = identifier if isinstance(identifier, ModelFamily) else ModelFamily.parse(identifier)
    overrides = {k: v for k, v in overrides.items() if v is not None}
    return PROFILE_FACTORIES[family](**overrides)
