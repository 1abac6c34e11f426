from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

import numpy as np


@dataclass
class FramePacket:
    frame: np.ndarray
    timestamp: float
    index: int = 0
    source: str = "video"


@dataclass
class TensorSpec:
    """Engine-reported description of one tensor."""

    name: str
    shape: Tuple[int, ...]
    dtype: np.dtype

    @property
    def ndim(self) -> int:
        return len(self.shape)

    def describe(self) -> str:
        return f"{self.name} [{', '.join(str(d) for d in self.shape)}] {np.dtype(self.dtype).name}"


@dataclass
class FrameResult:
    """What the orchestrator reports for one processed frame."""

    frame_id: int
    frame: np.ndarray
    fps: float = 0.0
    stages_ms: Dict[str, float] = field(default_factory=dict)
    background_ratio: Optional[float] = None
    warnings: list = field(default_factory=list)
