"""
Movement-based detection of the finger behind a key press.

Keeps a short (y, z, time) history for each of the ten fingertips and,
when asked, scores how far each fingertip moved down and toward the
keyboard just before the press. The highest positive score wins.
"""

from collections import deque
from dataclasses import dataclass
from typing import Optional

from .config import PressDetectionSettings
from .landmarks import Finger, FingerLabel, HandLandmarks, HandSide
from .logger import get_logger

logger = get_logger("PressDetector")


@dataclass(frozen=True)
class FingertipSample:
    """Fingertip position at one moment."""
    y: float
    z: float
    timestamp: float


class PressFingerDetector:
    """
    Infers which finger most likely caused a key press.

    Samples are split into an early window (lookback_start to lookback_end
    seconds before the press) and a late window (the last lookback_end
    seconds). A finger's score is the weighted y/z displacement from the
    earliest early sample to the latest late sample.
    """

    def __init__(self, settings: Optional[PressDetectionSettings] = None):
        """
        Initialize detector.

        Args:
            settings: Press detection settings. Uses defaults if None.
        """
        self.settings = settings or PressDetectionSettings()
        self._histories: dict[tuple[HandSide, Finger], deque[FingertipSample]] = {
            (side, finger): deque(maxlen=self.settings.history_size)
            for side in HandSide
            for finger in Finger
        }

    def record(self, hand: HandLandmarks, side: HandSide, timestamp: float) -> None:
        """
        Append the current fingertip positions of one hand.

        Args:
            hand: Validated hand landmarks.
            side: Anatomical side of the hand.
            timestamp: Frame time in seconds.
        """
        for finger in Finger:
            tip = hand.fingertip(finger)
            self._histories[(side, finger)].append(FingertipSample(tip.y, tip.z, timestamp))

    def score(self, side: HandSide, finger: Finger, now: float) -> Optional[float]:
        """
        Score one finger's press movement.

        Args:
            side: Hand side.
            finger: Finger to score.
            now: Press time in seconds.

        Returns:
            Weighted displacement, or None with insufficient history.
        """
        history = self._histories[(side, finger)]
        if len(history) < self.settings.min_samples:
            return None

        start = self.settings.lookback_start_sec
        end = self.settings.lookback_end_sec
        early = [s for s in history if end < now - s.timestamp <= start]
        late = [s for s in history if now - s.timestamp <= end]
        if not early or not late:
            return None

        first = early[0]
        last = late[-1]
        y_disp = last.y - first.y  # positive = moved down
        z_disp = last.z - first.z  # positive = moved toward keyboard
        return self.settings.y_weight * y_disp + self.settings.z_weight * z_disp

    def detect(self, now: float) -> FingerLabel:
        """
        Find the finger with the strongest press movement.

        Args:
            now: Press time in seconds.

        Returns:
            Label of the detected finger, or FingerLabel.UNKNOWN.
        """
        best_score = 0.0
        detected = FingerLabel.UNKNOWN

        for side in HandSide:
            for finger in Finger:
                score = self.score(side, finger, now)
                if score is not None and score > best_score:
                    best_score = score
                    detected = FingerLabel.for_finger(side, finger)

        logger.debug(f"Press attributed to {detected.value} (score {best_score:.4f})")
        return detected

    def history(self, side: HandSide, finger: Finger) -> tuple[FingertipSample, ...]:
        """Get a fingertip's samples, oldest first."""
        return tuple(self._histories[(side, finger)])

    def reset(self) -> None:
        """Forget all fingertip samples."""
        for history in self._histories.values():
            history.clear()
