"""Model-agnostic pose and anchor data types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple


@dataclass(frozen=True)
class Keypoint:
    """A single named 2D keypoint in frame pixel coordinates."""

    name: str
    x: float
    y: float
    score: float  # confidence [0..1]


@dataclass(frozen=True)
class PoseEstimate:
    """One detected body: an overall score and its keypoints keyed by name."""

    score: float
    keypoints: Dict[str, Keypoint] = field(default_factory=dict)

    @classmethod
    def from_keypoints(cls, score: float, keypoints: Iterable[Keypoint]) -> "PoseEstimate":
        # Names are unique; the first occurrence wins.
        by_name: Dict[str, Keypoint] = {}
        for kp in keypoints:
            by_name.setdefault(kp.name, kp)
        return cls(score=float(score), keypoints=by_name)

    def get(self, name: str) -> Optional[Keypoint]:
        return self.keypoints.get(name)


@dataclass(frozen=True)
class AnchorRegion:
    """Rectangle where the overlay is drawn, centred on (center_x, center_y)."""

    center_x: float
    center_y: float
    width: float
    height: float

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """(left, top, right, bottom)."""
        half_w = self.width / 2
        half_h = self.height / 2
        return (
            self.center_x - half_w,
            self.center_y - half_h,
            self.center_x + half_w,
            self.center_y + half_h,
        )
