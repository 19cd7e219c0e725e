"""Camera punch tracker: self-calibrating strike detection from 2D keypoints."""

from .analysis.engine import StrikeEngine, StepResult
from .analysis.calibration import CalibrationStatus
from .analysis.strike import StrikeEvent
from .config.engine_config import EngineConfig, DEFAULT_CONFIG
from .core.frame import Keypoint, KeypointFrame

__version__ = "0.1.0"
