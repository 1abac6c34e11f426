from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import numpy as np

from src.inference.engine import InferenceEngine
from src.utils.errors import ModelConfigError
from src.utils.types import TensorSpec

try:
    from tflite_runtime.interpreter import Interpreter, load_delegate
except ImportError:  # fallback to full TF installation
    try:
        from tensorflow.lite.python.interpreter import Interpreter, load_delegate  # type: ignore
    except ImportError:  # pragma: no cover
        Interpreter = None
        load_delegate = None

# Shorthand delegate names; anything else is treated as a shared-library path.
DELEGATE_LIBRARIES = {
    "gpu": "libtensorflowlite_gpu_delegate.so",
    "edgetpu": "libedgetpu.so.1",
}


def _spec(details: dict) -> TensorSpec:
    return TensorSpec(
        name=str(details.get("name", "")),
        shape=tuple(int(d) for d in details["shape"]),
        dtype=np.dtype(details["dtype"]),
    )


class TFLiteEngine(InferenceEngine):
    """TensorFlow Lite interpreter with an optional hardware delegate."""

    backend = "tflite"

    def __init__(self, model_path: str | Path, num_threads: int = 1, delegate: Optional[str] = None):
        super().__init__(model_path, num_threads)
        if Interpreter is None:
            raise ImportError("tflite-runtime (or tensorflow) is required for .tflite models")
        if not self.model_path.exists():
            raise FileNotFoundError(f"Model not found: {self.model_path}")

        self.delegates: List[object] = self._load_delegates(delegate)
        if self.delegates:
            try:
                self.interpreter = self._build_interpreter(self.delegates)
            except (ValueError, RuntimeError) as exc:
                self.logger.warning("Delegate could not be applied (%s); using default CPU path.", exc)
                self.delegates = []
        if not self.delegates:
            try:
                self.interpreter = self._build_interpreter([])
            except (ValueError, RuntimeError) as exc:
                raise ModelConfigError(f"Could not load model {self.model_path}: {exc}") from exc

        self._input_details = self.interpreter.get_input_details()[0]
        self._output_details = self.interpreter.get_output_details()[0]
        self._input_spec = _spec(self._input_details)
        self._output_spec = _spec(self._output_details)
        self.logger.info("Input tensor: %s", self._input_spec.describe())
        self.logger.info("Output tensor: %s", self._output_spec.describe())

    def _build_interpreter(self, delegates: List[object]):
        interpreter = Interpreter(
            model_path=str(self.model_path),
            num_threads=self.num_threads,
            experimental_delegates=delegates or None,
        )
        interpreter.allocate_tensors()
        return interpreter

    def _load_delegates(self, delegate: Optional[str]) -> List[object]:
        if not delegate:
            return []
        library = DELEGATE_LIBRARIES.get(delegate, delegate)
        try:
            loaded = load_delegate(library)
        except (ValueError, OSError) as exc:
            self.logger.warning("Delegate %s unavailable (%s); using default CPU path.", library, exc)
            return []
        self.logger.info("Using hardware delegate %s", library)
        return [loaded]

    @property
    def input_spec(self) -> TensorSpec:
        return self._input_spec

    @property
    def output_spec(self) -> TensorSpec:
        return self._output_spec

    def _run(self, batch: np.ndarray) -> np.ndarray:
        self.interpreter.set_tensor(self._input_details["index"], batch)
        self.interpreter.invoke()
        return self.interpreter.get_tensor(self._output_details["index"])

    def _release(self) -> None:
        # Interpreter must go before its delegates.
        self.interpreter = None
        self.delegates = []
