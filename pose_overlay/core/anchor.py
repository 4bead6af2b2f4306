"""Anchor region derivation from the best pose candidate."""

from __future__ import annotations

import math
from typing import Optional, Sequence

from ..config.settings import AnchorConfig
from .types import AnchorRegion, PoseEstimate


def select_best_pose(poses: Sequence[PoseEstimate]) -> Optional[PoseEstimate]:
    """Highest-scoring pose; ties go to the earliest in source order."""
    best = None
    for pose in poses:
        if best is None or pose.score > best.score:
            best = pose
    return best


def resolve_anchor(
    poses: Sequence[PoseEstimate],
    config: AnchorConfig = AnchorConfig(),
) -> Optional[AnchorRegion]:
    """
    Derive the anchor region from two hip keypoints of the best pose.

    Pure function: no state is kept between calls.

    Args:
        poses: Pose candidates from one sample (may be empty)
        config: Thresholds and region proportions

    Returns:
        AnchorRegion, or None when no pose / keypoint is confident enough
    """
    best = select_best_pose(poses)
    if best is None or not best.score > config.min_pose_score:
        return None

    left = best.get(config.left_keypoint)
    right = best.get(config.right_keypoint)
    if left is None or right is None:
        return None
    if not (left.score > config.min_keypoint_score and right.score > config.min_keypoint_score):
        return None
    if not all(math.isfinite(v) for v in (left.x, left.y, right.x, right.y)):
        return None

    span = abs(left.x - right.x)
    width = span * config.width_ratio
    return AnchorRegion(
        center_x=(left.x + right.x) / 2,
        center_y=(left.y + right.y) / 2 + span * config.vertical_offset_ratio,
        width=width,
        height=width * config.aspect_ratio,
    )
