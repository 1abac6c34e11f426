from typing import Any, Dict, Optional

from src.utils.logger import get_logger


class HealthMonitor:
    """Inference latency watchdog. It only reports; a stuck call still blocks the pipeline."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.logger = get_logger(__name__)
        self.misses = 0
        self.consecutive_misses = 0

    @property
    def budget_ms(self) -> float:
        return float(self.config.get("watchdog_ms", 0) or 0)

    def check_latency(self, latency_ms: Optional[float]) -> bool:
        budget = self.budget_ms
        if latency_ms is None or not budget:
            return True
        if latency_ms > budget:
            self.misses += 1
            self.consecutive_misses += 1
            self.logger.warning(
                "Latency budget exceeded: %.2f ms > %.2f ms (%d in a row)", latency_ms, budget, self.consecutive_misses
            )
            return False
        self.consecutive_misses = 0
        return True
