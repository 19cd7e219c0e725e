"""Overlay rendering: arm skeleton, per-limb stats and calibration guidance."""

import cv2
import numpy as np
from typing import List, Optional, Tuple

from ..analysis.calibration import GUIDANCE, CalibrationStatus
from ..analysis.engine import StepResult
from ..analysis.scoring import LimbStats
from ..analysis.strike import LimbDiagnostics
from ..config.keypoints import (
    ARM_CONNECTIONS,
    ARM_KEYPOINTS,
    CONNECTION_COLOR,
    KEYPOINT_COLOR,
    SIDE_COLORS,
)
from ..core.frame import KeypointFrame

GUIDANCE_COLORS = {
    CalibrationStatus.WAITING: (0, 200, 255),     # amber
    CalibrationStatus.COLLECTING: (255, 200, 0),  # cyan-blue
    CalibrationStatus.COMPLETE: (0, 255, 128),    # green
}


def limb_panel_lines(side: str, stats: LimbStats, debug: LimbDiagnostics) -> List[str]:
    """Text lines of one limb's stats panel."""
    return [
        f"{side.upper()}  {stats.total} strikes",
        f"last: {stats.last_speed:.2f} spd  {stats.last_power:.2f} pwr  {stats.last_percent}%",
        f"baseline: {stats.baseline:.2f}  avg: {stats.average_percent}%",
        f"completion: {debug.completion * 100:.0f}%",
        f"speed: {debug.speed:.2f} / {debug.speed_threshold:.2f}",
        f"reach: {debug.extension_norm:.2f} / {debug.trigger_norm:.2f}",
        f"status: {debug.status}",
    ]


class ArmSkeletonDrawer:
    """Draw shoulder-elbow-wrist segments and joints for both arms."""

    def __init__(
        self,
        line_thickness: int = 2,
        point_radius: int = 4,
        confidence_threshold: float = 0.3,
    ):
        self.line_thickness = line_thickness
        self.point_radius = point_radius
        self.confidence_threshold = confidence_threshold

    def _visible(self, keypoints: KeypointFrame, name: str) -> Optional[Tuple[int, int]]:
        kp = keypoints.get(name)
        if kp is None or kp.confidence <= self.confidence_threshold:
            return None
        return int(round(kp.x)), int(round(kp.y))

    def draw(self, frame: np.ndarray, keypoints: KeypointFrame) -> np.ndarray:
        """
        Draw the arm skeleton on a copy of the frame.

        Args:
            frame: BGR image
            keypoints: Keypoints of the tracked person

        Returns:
            Frame with arms drawn
        """
        frame = frame.copy()

        # Lines first so joints sit on top
        for start_name, end_name in ARM_CONNECTIONS:
            start = self._visible(keypoints, start_name)
            end = self._visible(keypoints, end_name)
            if start is None or end is None:
                continue
            cv2.line(frame, start, end, CONNECTION_COLOR, self.line_thickness, cv2.LINE_AA)

        for name in ARM_KEYPOINTS:
            center = self._visible(keypoints, name)
            if center is None:
                continue
            cv2.circle(frame, center, self.point_radius, KEYPOINT_COLOR, -1, cv2.LINE_AA)

        return frame


class OverlayRenderer:
    """Render the strike engine's per-frame output onto video frames."""

    def __init__(
        self,
        font_scale: float = 0.5,
        text_color: Tuple[int, int, int] = (255, 255, 255),
        bg_color: Tuple[int, int, int] = (0, 0, 0),
        bg_alpha: float = 0.6,
        confidence_threshold: float = 0.3,
    ):
        """
        Initialize overlay renderer.

        Args:
            font_scale: OpenCV font scale
            text_color: Text color (BGR)
            bg_color: Panel background color (BGR)
            bg_alpha: Panel background opacity
            confidence_threshold: Keypoints at or below this are not drawn
        """
        self.font = cv2.FONT_HERSHEY_SIMPLEX
        self.font_scale = font_scale
        self.font_thickness = 1
        self.text_color = text_color
        self.bg_color = bg_color
        self.bg_alpha = bg_alpha
        self.skeleton = ArmSkeletonDrawer(confidence_threshold=confidence_threshold)

    def _text_size(self, text: str) -> Tuple[int, int]:
        (w, h), baseline = cv2.getTextSize(text, self.font, self.font_scale, self.font_thickness)
        return w, h + baseline

    def draw_panel(
        self,
        frame: np.ndarray,
        lines: List[str],
        position: str = "top-left",
        color: Optional[Tuple[int, int, int]] = None,
        padding: int = 10,
    ) -> np.ndarray:
        """
        Draw a block of text lines on a translucent background.

        Args:
            frame: BGR image
            lines: Text lines, top to bottom
            position: 'top-left', 'top-right', 'bottom-left' or 'bottom-center'
            color: Text color (BGR), defaults to self.text_color
            padding: Distance from the frame edge

        Returns:
            Frame with the panel drawn
        """
        if not lines:
            return frame
        frame = frame.copy()
        h, w = frame.shape[:2]
        color = color or self.text_color

        sizes = [self._text_size(line) for line in lines]
        line_spacing = 6
        line_height = max(s[1] for s in sizes)
        total_height = line_height * len(lines) + line_spacing * (len(lines) - 1)
        max_width = max(s[0] for s in sizes)

        panel_padding = 6
        if position == "top-right":
            x, y = w - max_width - padding - panel_padding, padding + panel_padding
        elif position == "bottom-left":
            x, y = padding + panel_padding, h - total_height - padding - panel_padding
        elif position == "bottom-center":
            x, y = (w - max_width) // 2, h - total_height - padding - panel_padding
        else:  # top-left
            x, y = padding + panel_padding, padding + panel_padding

        overlay = frame.copy()
        cv2.rectangle(
            overlay,
            (x - panel_padding, y - panel_padding),
            (x + max_width + panel_padding, y + total_height + panel_padding),
            self.bg_color,
            -1,
        )
        frame = cv2.addWeighted(overlay, self.bg_alpha, frame, 1 - self.bg_alpha, 0)

        current_y = y
        for line in lines:
            current_y += line_height
            cv2.putText(frame, line, (x, current_y - 4), self.font, self.font_scale,
                        color, self.font_thickness, cv2.LINE_AA)
            current_y += line_spacing

        return frame

    def draw_limb_panel(
        self,
        frame: np.ndarray,
        side: str,
        stats: LimbStats,
        debug: LimbDiagnostics,
    ) -> np.ndarray:
        """Left limb panel goes top-left, right limb panel top-right."""
        position = "top-left" if side == "left" else "top-right"
        return self.draw_panel(frame, limb_panel_lines(side, stats, debug), position, SIDE_COLORS[side])

    def draw_guidance(self, frame: np.ndarray, status: CalibrationStatus) -> np.ndarray:
        return self.draw_panel(frame, [GUIDANCE[status]], "bottom-center", GUIDANCE_COLORS[status])

    def render(
        self,
        frame: np.ndarray,
        keypoints: Optional[KeypointFrame],
        result: StepResult,
    ) -> np.ndarray:
        """
        Draw everything for one processed frame.

        Args:
            frame: BGR image
            keypoints: Keypoints fed to the engine (None to skip the skeleton)
            result: Engine output for the same frame

        Returns:
            Annotated copy of the frame
        """
        if keypoints is not None:
            frame = self.skeleton.draw(frame, keypoints)
        for side in ("left", "right"):
            frame = self.draw_limb_panel(frame, side, result.stats(side), result.debug(side))
        return self.draw_guidance(frame, result.calibration)
