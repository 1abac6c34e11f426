from __future__ import annotations

import abc
import time
from pathlib import Path

import numpy as np

from src.utils.errors import InferenceError
from src.utils.logger import get_logger
from src.utils.types import TensorSpec


class InferenceEngine(abc.ABC):
    """
    Narrow contract around a black-box model runtime.

    One input tensor, one output tensor, one synchronous forward pass per
    ``invoke``. Subclasses own native handles and must release them in
    ``close``; engines are context managers so release happens on every exit
    path.
    """

    backend = "engine"

    def __init__(self, model_path: str | Path, num_threads: int = 1):
        self.model_path = Path(model_path)
        self.num_threads = int(num_threads)
        self.logger = get_logger(__name__)
        self.last_inference_ms = 0.0
        self._closed = False

    @property
    @abc.abstractmethod
    def input_spec(self) -> TensorSpec:
        raise NotImplementedError

    @property
    @abc.abstractmethod
    def output_spec(self) -> TensorSpec:
        raise NotImplementedError

    @abc.abstractmethod
    def _run(self, batch: np.ndarray) -> np.ndarray:
        """Run one forward pass on a tensor shaped like ``input_spec``; return the raw output."""
        raise NotImplementedError

    def _release(self) -> None:
        """Drop native handles. Called once by ``close``."""

    def invoke(self, tensor: np.ndarray) -> np.ndarray:
        """
        Copy ``tensor`` into the input tensor, run the model and return the
        output with its batch dimension removed. The returned array must not
        be held across calls.
        """
        if self._closed:
            raise InferenceError(f"{self.backend} engine for {self.model_path} is closed")

        spec = self.input_spec
        expected = int(np.prod(spec.shape)) * np.dtype(spec.dtype).itemsize
        if tensor.nbytes != expected:
            raise InferenceError(
                f"input buffer is {tensor.nbytes} bytes, {spec.describe()} needs {expected}"
            )
        batch = np.ascontiguousarray(tensor, dtype=spec.dtype).reshape(spec.shape)

        start = time.perf_counter()
        try:
            output = self._run(batch)
        except InferenceError:
            raise
        except Exception as exc:
            raise InferenceError(f"{self.backend} invocation failed: {exc}") from exc
        self.last_inference_ms = (time.perf_counter() - start) * 1000.0
        self.logger.debug("Inference time: %.1fms", self.last_inference_ms)

        return output[0] if output.ndim == len(self.output_spec.shape) and output.shape[0] == 1 else output

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._release()
        self.logger.info("Closed %s engine for %s", self.backend, self.model_path)

    def __enter__(self) -> "InferenceEngine":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def describe(self) -> str:
        return f"{self.backend}: in={self.input_spec.describe()} out={self.output_spec.describe()}"
