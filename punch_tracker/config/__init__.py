"""Configuration module for the punch tracker."""

from .engine_config import (
    EngineConfig,
    DEFAULT_CONFIG,
)
from .keypoints import (
    COCO_KEYPOINTS,
    KEYPOINT_NAMES,
    NUM_KEYPOINTS,
    ARM_KEYPOINTS,
    ARM_CONNECTIONS,
    SIDES,
)
