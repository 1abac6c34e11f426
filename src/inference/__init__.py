from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from src.inference.engine import InferenceEngine
from src.utils.errors import ModelConfigError

BACKENDS = ("auto", "tflite", "onnx")


def open_engine(
    model_path: str | Path,
    num_threads: int = 1,
    backend: str = "auto",
    delegate: Optional[str] = None,
    providers: Optional[Sequence[str]] = None,
) -> InferenceEngine:
    """Open the runtime matching ``backend``, or the model file's extension when ``auto``."""
    path = Path(model_path)
    if backend == "auto":
        suffix = path.suffix.lower()
        if suffix == ".tflite":
            backend = "tflite"
        elif suffix == ".onnx":
            backend = "onnx"
        else:
            raise ModelConfigError(f"Cannot infer backend from model extension {suffix!r}: {path}")

    if backend == "tflite":
        from src.inference.tflite_engine import TFLiteEngine

        return TFLiteEngine(path, num_threads=num_threads, delegate=delegate)
    if backend == "onnx":
        from src.inference.onnx_engine import OnnxEngine

        return OnnxEngine(path, num_threads=num_threads, providers=providers)
    raise ModelConfigError(f"Unknown inference backend {backend!r} (expected one of {BACKENDS})")


__all__ = ["BACKENDS", "InferenceEngine", "open_engine"]
