from .keypoints import COCO_KEYPOINTS, KEYPOINT_NAMES, LEFT_HIP, RIGHT_HIP
from .settings import (
    AnchorConfig,
    CameraConfig,
    DisplayConfig,
    LoopConfig,
    ModelConfig,
    OverlayConfig,
    SamplerConfig,
    StyleConfig,
    DEFAULT_CONFIG,
    load_config,
    validate_config,
)
