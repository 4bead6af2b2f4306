"""YOLO pose wrapper exposed as an asynchronous pose source."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Protocol

import numpy as np

from ..config.keypoints import COCO_KEYPOINTS
from ..errors import AcquisitionError, EstimationError
from .types import Keypoint, PoseEstimate

logger = logging.getLogger(__name__)


class PoseSource(Protocol):
    """Maps a video frame to zero or more scored pose estimates."""

    @property
    def ready(self) -> bool: ...

    async def estimate(self, frame: np.ndarray) -> List[PoseEstimate]: ...


class YoloPoseSource:
    """Pose source backed by an Ultralytics YOLO pose model."""

    def __init__(self, model_name: str = "yolo11n-pose.pt", device: str = "auto", conf: float = 0.25):
        """
        Args:
            model_name: YOLO pose weights (yolo11n-pose, yolo11s-pose, ...)
            device: Device to run on ('auto', 'cpu', 'cuda', 'mps')
            conf: Detection confidence passed to the model
        """
        self.model_name = model_name
        self.requested_device = device
        self.device = None
        self.conf = conf
        self.model = None

    @property
    def ready(self) -> bool:
        return self.model is not None

    def load(self):
        """
        Load model weights.

        Raises:
            AcquisitionError: If the model cannot be loaded.
        """
        try:
            from ultralytics import YOLO

            self.device = self._resolve_device(self.requested_device)
            self.model = YOLO(self._resolve_model_path(self.model_name))
        except Exception as e:
            raise AcquisitionError(f"Cannot load pose model {self.model_name}: {e}") from e
        logger.info("Loaded pose model %s on %s", self.model_name, self.device)

    def _resolve_model_path(self, model_name: str) -> str:
        p = Path(str(model_name))
        if p.exists():
            return str(p)

        # <root>/pose_overlay/core/pose_estimator.py -> <root>/models/<weights>.pt
        root = Path(__file__).resolve().parents[2]
        for cand in (root / p.name, root / "models" / p.name):
            if cand.exists():
                return str(cand)

        # Fall back to whatever Ultralytics understands (may download if online).
        return str(model_name)

    def _resolve_device(self, device: str) -> str:
        if device == "auto":
            import torch
            if torch.cuda.is_available():
                return "cuda"
            elif torch.backends.mps.is_available():
                return "mps"
            return "cpu"
        return device

    def predict(self, frame: np.ndarray) -> List[PoseEstimate]:
        """Run pose estimation on a single BGR frame (blocking)."""
        if self.model is None:
            raise EstimationError("Pose model is not loaded")
        try:
            results = self.model.predict(frame, conf=self.conf, device=self.device, verbose=False)
        except Exception as e:
            raise EstimationError(f"Pose estimation failed: {e}") from e
        return parse_result(results[0])

    async def estimate(self, frame: np.ndarray) -> List[PoseEstimate]:
        return await asyncio.to_thread(self.predict, frame)


def parse_result(result) -> List[PoseEstimate]:
    """Convert one YOLO result into pose estimates, keeping detection order."""
    if result.keypoints is None or len(result.keypoints) == 0:
        return []

    keypoints_data = np.asarray(result.keypoints.data.cpu().numpy())  # (N, 17, 3)
    box_scores = None
    if result.boxes is not None and len(result.boxes) == len(keypoints_data):
        box_scores = np.asarray(result.boxes.conf.cpu().numpy()).reshape(-1)

    poses = []
    for person_idx, kpts in enumerate(keypoints_data):
        if kpts.shape[-1] < 3:
            # Model without keypoint visibility; treat as fully confident.
            kpts = np.concatenate([kpts, np.ones((len(kpts), 1), dtype=kpts.dtype)], axis=1)

        keypoints = [
            Keypoint(name=COCO_KEYPOINTS[i], x=float(x), y=float(y), score=float(s))
            for i, (x, y, s) in enumerate(kpts[:, :3])
            if i in COCO_KEYPOINTS
        ]
        if box_scores is not None:
            score = float(box_scores[person_idx])
        else:
            score = float(np.mean(kpts[:, 2])) if len(kpts) else 0.0
        poses.append(PoseEstimate.from_keypoints(score, keypoints))

    return poses
