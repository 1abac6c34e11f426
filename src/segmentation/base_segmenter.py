from __future__ import annotations

import abc
import numpy as np


class BaseSegmenter(abc.ABC):
    @abc.abstractmethod
    def infer(self, frame: np.ndarray) -> dict:
        """
        Input:
            frame: RGB image (H, W, 3) uint8
        Output:
            {
              "mask": np.ndarray (H, W) uint8   # 1 = background, 0 = person
              "low_res_mask": np.ndarray (h, w) uint8
              "latency_ms": float               # inference only
            }
        """
        raise NotImplementedError
