"""
Exception hierarchy for the background replacement pipeline.

Everything except NormalizationRangeError is fatal: the pipeline halts with a
descriptive message instead of running degraded.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class BackgroundRemoverError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ModelConfigError(BackgroundRemoverError):
    """Unknown model family or unusable model configuration."""


class ModelShapeError(BackgroundRemoverError):
    """Loaded model tensors do not match the active model profile."""


class InferenceError(BackgroundRemoverError):
    """The inference engine failed to run a forward pass."""


class FrameSizeMismatchError(BackgroundRemoverError):
    """Frame, replacement and mask must share spatial dimensions."""


class NormalizationRangeError(BackgroundRemoverError):
    """Preprocessed values escaped the normalization policy's range (debug only)."""
