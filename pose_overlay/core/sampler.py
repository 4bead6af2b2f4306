"""Wall-clock throttle between pose estimates."""

from typing import Optional


class ThrottledSampler:
    """
    Decide once per display tick whether a pose sample is due.

    The first tick is always due. After that a sample is due once at least
    ``min_interval`` seconds have passed since the last one was taken.
    """

    def __init__(self, min_interval: float = 0.2):
        """
        Args:
            min_interval: Minimum seconds between samples
        """
        if min_interval < 0:
            raise ValueError("min_interval must be non-negative")
        self.min_interval = min_interval
        self.last_sample_time: Optional[float] = None

    def due(self, now: float) -> bool:
        if self.last_sample_time is None:
            return True
        return now - self.last_sample_time >= self.min_interval

    def mark(self, now: float):
        """Record a sample at ``now``, whatever its outcome."""
        self.last_sample_time = now

    def poll(self, now: float) -> bool:
        """Check ``due`` and mark the sample when it is."""
        if not self.due(now):
            return False
        self.mark(now)
        return True

    def reset(self):
        self.last_sample_time = None
