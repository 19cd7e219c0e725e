"""COCO keypoint definitions and the subset used by the strike engine."""

# COCO 17 keypoints (layout produced by YOLO pose models)
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

NUM_KEYPOINTS = len(COCO_KEYPOINTS)

# Reverse mapping
KEYPOINT_NAMES = {v: k for k, v in COCO_KEYPOINTS.items()}

SIDES = ("left", "right")

# Names the engine reads from each frame
ARM_KEYPOINTS = (
    "left_shoulder",
    "right_shoulder",
    "left_elbow",
    "right_elbow",
    "left_wrist",
    "right_wrist",
)

# Arm segments drawn by the overlay (shoulder -> elbow -> wrist)
ARM_CONNECTIONS = [
    ("left_shoulder", "left_elbow"),
    ("left_elbow", "left_wrist"),
    ("right_shoulder", "right_elbow"),
    ("right_elbow", "right_wrist"),
]

# Colors per side (BGR format for OpenCV)
SIDE_COLORS = {
    "left": (0, 255, 0),      # green
    "right": (0, 165, 255),   # orange
}
KEYPOINT_COLOR = (94, 197, 34)     # dots
CONNECTION_COLOR = (250, 165, 96)  # arm lines


def keypoint_name(side: str, joint: str) -> str:
    """Return e.g. ``left_wrist`` for ``("left", "wrist")``."""
    return f"{side}_{joint}"
