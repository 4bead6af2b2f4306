from .types import Keypoint, PoseEstimate, AnchorRegion
from .anchor import resolve_anchor, select_best_pose
from .sampler import ThrottledSampler
from .selection import Template, TemplateSelection

