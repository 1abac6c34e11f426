from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import numpy as np

from src.compositing.compositor import check_same_size, composite
from src.inference import open_engine
from src.inference.engine import InferenceEngine
from src.segmentation.person_segmenter import PersonSegmenter
from src.segmentation.preprocess import DEFAULT_INTERPOLATION, parse_interpolation
from src.segmentation.profiles import ModelProfile, resolve_profile
from src.segmentation.shapes import TensorShape, negotiate_shape
from src.utils.config import get
from src.utils.errors import ModelConfigError
from src.utils.logger import get_logger
from src.utils.timing import StageTimer


class BackgroundRemover:
    """
    Replaces everything that is not a person with a background image.

    Construction resolves the model profile, opens the inference engine and
    negotiates tensor shapes; any mismatch is fatal and leaves no engine
    open. ``process_frame`` then works on RGB frames in place.
    """

    def __init__(
        self,
        model_path: Optional[str | Path],
        model_family: str,
        num_threads: int = 1,
        *,
        backend: str = "auto",
        delegate: Optional[str] = None,
        providers: Optional[Sequence[str]] = None,
        person_class_index: Optional[int] = None,
        threshold: Optional[float] = None,
        interpolation: int = DEFAULT_INTERPOLATION,
        debug_checks: bool = __debug__,
        engine: Optional[InferenceEngine] = None,
    ):
        self.logger = get_logger(__name__)
        # Resolved first so a bad family fails before any model is opened.
        self.profile: ModelProfile = resolve_profile(
            model_family, person_class_index=person_class_index, threshold=threshold
        )

        if engine is None:
            if model_path is None:
                raise ModelConfigError("model_path is required when no engine is supplied")
            engine = open_engine(model_path, num_threads=num_threads, backend=backend, delegate=delegate, providers=providers)
        self.engine = engine

        try:
            self.shape: TensorShape = negotiate_shape(self.profile, engine.input_spec, engine.output_spec)
        except BaseException:
            engine.close()
            raise

        self.segmenter = PersonSegmenter(
            engine, self.profile, self.shape, interpolation=interpolation, debug_checks=debug_checks
        )
        self.last_frame_mask: Optional[np.ndarray] = None

        self.logger.info(
            "Initialized %s with %dx%dpx input and stride=%d for model %s",
            engine.backend,
            self.shape.input_width,
            self.shape.input_height,
            self.shape.stride,
            engine.model_path,
        )

    @classmethod
    def from_config(cls, cfg: Dict[str, Any], engine: Optional[InferenceEngine] = None) -> "BackgroundRemover":
        family = get(cfg, "model.family")
        if not family:
            raise ModelConfigError("model.family is required")
        debug_checks = get(cfg, "runtime.debug_checks")
        return cls(
            get(cfg, "model.path"),
            family,
            int(get(cfg, "model.threads", 4)),
            backend=get(cfg, "model.backend", "auto"),
            delegate=get(cfg, "model.delegate"),
            providers=get(cfg, "model.providers"),
            person_class_index=get(cfg, "model.person_class_index"),
            threshold=get(cfg, "model.threshold"),
            interpolation=parse_interpolation(get(cfg, "runtime.interpolation")),
            debug_checks=__debug__ if debug_checks is None else bool(debug_checks),
            engine=engine,
        )

    @property
    def last_input(self) -> Optional[np.ndarray]:
        """Most recent preprocessed model input (input_height, input_width, 3) float32."""
        return self.segmenter.last_input

    @property
    def last_mask(self) -> Optional[np.ndarray]:
        """Most recent low-resolution mask (mask_height, mask_width) uint8."""
        return self.segmenter.last_low_res_mask

    def process_frame(self, frame: np.ndarray, replacement: np.ndarray, timer: Optional[StageTimer] = None) -> np.ndarray:
        """
        Args:
            frame: RGB image (H, W, 3) uint8, overwritten in place
            replacement: RGB image with exactly frame's shape

        Returns:
            frame
        """
        check_same_size(frame, replacement)
        timer = timer or StageTimer()

        seg = self.segmenter.infer(frame, timer)
        with timer.stage("composite"):
            composite(frame, seg["mask"], replacement)
        self.last_frame_mask = seg["mask"]
        return frame

    def close(self) -> None:
        self.engine.close()

    def __enter__(self) -> "BackgroundRemover":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
