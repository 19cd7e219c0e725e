"""Analysis module: filtering, range learning, strike detection and scoring."""

from .limb import LimbState, StrikeState
from .extension import ExtensionTracker, ExtensionSample
from .stability import StabilityGate
from .strike import StrikeDetector, StrikeEvent, LimbDiagnostics
from .calibration import CalibrationMonitor, CalibrationStatus
from .scoring import ScoreEngine, ScoreHistory, LimbStats, percentile
from .engine import StrikeEngine, EngineState, StepResult, arbitrate
