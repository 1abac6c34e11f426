from __future__ import annotations

from typing import Optional

import numpy as np

from src.inference.engine import InferenceEngine
from src.segmentation.base_segmenter import BaseSegmenter
from src.segmentation.postprocess import decode_mask, upsample_mask
from src.segmentation.preprocess import DEFAULT_INTERPOLATION, preprocess
from src.segmentation.profiles import ModelProfile
from src.segmentation.shapes import TensorShape, negotiate_shape
from src.utils.timing import StageTimer


class PersonSegmenter(BaseSegmenter):
    """
    Person/background segmentation on top of any InferenceEngine.

    The intermediate buffers of the most recent frame stay readable through
    ``last_input`` and ``last_low_res_mask`` for debug views.
    """

    def __init__(
        self,
        engine: InferenceEngine,
        profile: ModelProfile,
        shape: Optional[TensorShape] = None,
        interpolation: int = DEFAULT_INTERPOLATION,
        debug_checks: bool = __debug__,
    ):
        self.engine = engine
        self.profile = profile
        self.shape = shape or negotiate_shape(profile, engine.input_spec, engine.output_spec)
        self.interpolation = interpolation
        self.debug_checks = debug_checks
        self.last_input: Optional[np.ndarray] = None
        self.last_low_res_mask: Optional[np.ndarray] = None

    def infer(self, frame: np.ndarray, timer: Optional[StageTimer] = None) -> dict:
        timer = timer or StageTimer()

        with timer.stage("preprocess"):
            tensor = preprocess(frame, self.profile, self.shape, self.interpolation, self.debug_checks)
        self.last_input = tensor

        with timer.stage("inference"):
            output = self.engine.invoke(tensor)

        with timer.stage("decode"):
            low_res = decode_mask(output, self.profile, self.shape)
            mask = upsample_mask(low_res, (frame.shape[1], frame.shape[0]), self.interpolation)
        self.last_low_res_mask = low_res

        return {
            "mask": mask,
            "low_res_mask": low_res,
            "latency_ms": self.engine.last_inference_ms,
        }
