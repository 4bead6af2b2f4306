"""COCO keypoint definitions used by the pose source and anchor resolver."""

# COCO 17 keypoints, in model output order
COCO_KEYPOINTS = {
    0: "nose",
    1: "left_eye",
    2: "right_eye",
    3: "left_ear",
    4: "right_ear",
    5: "left_shoulder",
    6: "right_shoulder",
    7: "left_elbow",
    8: "right_elbow",
    9: "left_wrist",
    10: "right_wrist",
    11: "left_hip",
    12: "right_hip",
    13: "left_knee",
    14: "right_knee",
    15: "left_ankle",
    16: "right_ankle",
}

# Reverse mapping
KEYPOINT_NAMES = {v: k for k, v in COCO_KEYPOINTS.items()}

# Anchor keypoints
LEFT_HIP = "left_hip"
RIGHT_HIP = "right_hip"
