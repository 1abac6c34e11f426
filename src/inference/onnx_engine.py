from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np
import onnxruntime as ort

from src.inference.engine import InferenceEngine
from src.utils.errors import ModelConfigError
from src.utils.types import TensorSpec

DEFAULT_PROVIDERS = ("CUDAExecutionProvider", "CPUExecutionProvider")

ONNX_DTYPES = {
    "tensor(float)": np.float32,
    "tensor(float16)": np.float16,
    "tensor(double)": np.float64,
    "tensor(uint8)": np.uint8,
    "tensor(int8)": np.int8,
    "tensor(int32)": np.int32,
    "tensor(int64)": np.int64,
}


def _spec(node, batch_dim: bool = True) -> TensorSpec:
    dims = []
    for i, d in enumerate(node.shape):
        if isinstance(d, int) and d > 0:
            dims.append(d)
        else:
            # Symbolic batch dims run with batch 1; symbolic spatial dims cannot be negotiated.
            dims.append(1 if (i == 0 and batch_dim) else -1)
    return TensorSpec(name=node.name, shape=tuple(dims), dtype=np.dtype(ONNX_DTYPES.get(node.type, np.void)))


def select_providers(requested: Optional[Sequence[str]] = None) -> List[str]:
    """Keep the requested providers this onnxruntime build has, always ending with CPU."""
    available = set(ort.get_available_providers())
    providers = [p for p in (requested or DEFAULT_PROVIDERS) if p in available]
    if "CPUExecutionProvider" not in providers:
        providers.append("CPUExecutionProvider")
    return providers


class OnnxEngine(InferenceEngine):
    """ONNX Runtime session for NHWC exports of the segmentation models."""

    backend = "onnx"

    def __init__(self, model_path: str | Path, num_threads: int = 1, providers: Optional[Sequence[str]] = None):
        super().__init__(model_path, num_threads)
        if not self.model_path.exists():
            raise FileNotFoundError(f"Model not found: {self.model_path}")

        options = ort.SessionOptions()
        options.intra_op_num_threads = self.num_threads
        options.inter_op_num_threads = 1
        try:
            self.session = ort.InferenceSession(
                str(self.model_path),
                sess_options=options,
                providers=select_providers(providers),
            )
        except Exception as exc:
            raise ModelConfigError(f"Could not load model {self.model_path}: {exc}") from exc
        self.logger.info("ONNX Runtime using: %s", self.session.get_providers()[0])

        self._input_spec = _spec(self.session.get_inputs()[0])
        self._output_spec = _spec(self.session.get_outputs()[0])
        self.logger.info("Input tensor: %s", self._input_spec.describe())
        self.logger.info("Output tensor: %s", self._output_spec.describe())

    @property
    def input_spec(self) -> TensorSpec:
        return self._input_spec

    @property
    def output_spec(self) -> TensorSpec:
        return self._output_spec

    def _run(self, batch: np.ndarray) -> np.ndarray:
        outputs = self.session.run([self._output_spec.name], {self._input_spec.name: batch})
        return np.asarray(outputs[0])

    def _release(self) -> None:
        self.session = None
