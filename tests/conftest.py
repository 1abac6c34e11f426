from __future__ import annotations

from typing import Callable, Optional, Tuple

import numpy as np
import pytest

from src.inference.engine import InferenceEngine
from src.utils.types import TensorSpec


class FakeEngine(InferenceEngine):
    """In-memory stand-in for a native runtime; returns a fixed output tensor."""

    backend = "fake"

    def __init__(
        self,
        input_shape: Tuple[int, ...] = (1, 16, 16, 3),
        output_shape: Tuple[int, ...] = (1, 16, 16, 21),
        output: Optional[np.ndarray] = None,
        input_dtype=np.float32,
        output_dtype=np.float32,
        fail_with: Optional[Exception] = None,
    ):
        super().__init__("models/fake.tflite", num_threads=1)
        self._input_spec = TensorSpec("input", tuple(input_shape), np.dtype(input_dtype))
        self._output_spec = TensorSpec("output", tuple(output_shape), np.dtype(output_dtype))
        self.output = np.zeros(output_shape, dtype=np.float32) if output is None else output
        self.fail_with = fail_with
        self.calls = []
        self.released = False

    @property
    def input_spec(self) -> TensorSpec:
        return self._input_spec

    @property
    def output_spec(self) -> TensorSpec:
        return self._output_spec

    def _run(self, batch: np.ndarray) -> np.ndarray:
        self.calls.append(batch.copy())
        if self.fail_with is not None:
            raise self.fail_with
        return self.output.reshape(self._output_spec.shape)

    def _release(self) -> None:
        self.released = True


@pytest.fixture
def make_engine() -> Callable[..., FakeEngine]:
    return FakeEngine


def class_scores(height: int, width: int, winner: int, classes: int = 21) -> np.ndarray:
    """(1, h, w, classes) scores where ``winner`` is strictly highest everywhere."""
    scores = np.zeros((1, height, width, classes), dtype=np.float32)
    scores[..., winner] = 1.0
    return scores


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)
