import sys
from pathlib import Path

import pytest


# Ensure the repo root is importable when tests are run without installing the package.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pose_overlay.core.types import Keypoint, PoseEstimate  # noqa: E402


def make_pose(
    score: float = 0.9,
    left=(100.0, 200.0, 0.9),
    right=(140.0, 200.0, 0.9),
    extra=(),
) -> PoseEstimate:
    """Pose with left/right hips given as (x, y, score); None omits a hip."""
    keypoints = []
    if left is not None:
        keypoints.append(Keypoint("left_hip", *left))
    if right is not None:
        keypoints.append(Keypoint("right_hip", *right))
    keypoints.extend(extra)
    return PoseEstimate.from_keypoints(score, keypoints)


@pytest.fixture
def pose_factory():
    return make_pose
