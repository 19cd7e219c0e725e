from .frame import Keypoint, KeypointFrame
from .smoother import MotionFilter
from .recording import KeypointRecorder, read_keypoint_frames

# NOTE: PoseEstimator and the video helpers pull in heavy runtime deps
# (ultralytics/torch, opencv); import them from their modules directly so the
# engine stays importable for unit tests and replay.
