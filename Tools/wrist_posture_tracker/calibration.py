"""
Baseline self-calibration for the six wrist angle channels.

Each channel captures its resting angle once per calibration epoch and
reports later readings relative to it. A reset starts a new epoch and
clears every channel at once.
"""

from dataclasses import dataclass
from typing import Optional

from .angle_engine import AngleChannel, AngleEngine
from .config import CalibrationSettings
from .landmarks import AngleType, HandSide
from .logger import get_logger
from .median_filter import angle_diff

logger = get_logger("Calibration")


@dataclass
class AngleReadings:
    """Latest reported angle per channel, None until first computed."""
    left_deviation: Optional[float] = None
    right_deviation: Optional[float] = None
    left_pronation: Optional[float] = None
    right_pronation: Optional[float] = None
    left_extension: Optional[float] = None
    right_extension: Optional[float] = None

    def get(self, angle_type: AngleType, side: HandSide) -> Optional[float]:
        """Get the reading for an angle type and side."""
        return getattr(self, f"{side.value}_{angle_type.value}")

    def to_dict(self) -> dict[str, Optional[float]]:
        """Convert to a plain dictionary keyed like 'left_deviation'."""
        return {
            f"{side.value}_{angle_type.value}": self.get(angle_type, side)
            for angle_type in AngleType
            for side in HandSide
        }


class CalibrationController:
    """
    Captures per-channel baselines and reports baseline-relative angles.

    A baseline may be captured once per epoch, and only when the
    channel's smoothing window is full and the stabilization delay has
    passed since the epoch began.

    Attributes:
        engine: Angle engine whose channels are calibrated.
        settings: Calibration settings.
    """

    def __init__(
        self,
        engine: AngleEngine,
        now: float,
        settings: Optional[CalibrationSettings] = None
    ):
        """
        Initialize calibration controller.

        Args:
            engine: Angle engine owning the channels.
            now: Start time of the first epoch, in seconds.
            settings: Calibration settings. Uses defaults if None.
        """
        self.engine = engine
        self.settings = settings or CalibrationSettings()
        self._epoch_start = now
        self._epoch_count = 1

    def apply(
        self,
        side: HandSide,
        smoothed: dict[AngleType, float],
        now: float
    ) -> dict[AngleType, float]:
        """
        Calibrate one hand's smoothed angles.

        Args:
            side: Anatomical side of the hand.
            smoothed: Smoothed angle per AngleType.
            now: Current time in seconds.

        Returns:
            Reported angle per AngleType (baseline-relative once captured).
        """
        reported = {}
        for angle_type, value in smoothed.items():
            channel = self.engine.channel(angle_type, side)
            if channel.baseline is None and self._can_capture(channel, now):
                channel.baseline = value
                logger.info(f"Baseline captured for {channel.key}: {value:.1f} deg")

            if channel.baseline is not None:
                value = angle_diff(value, channel.baseline)

            channel.last_value = value
            reported[angle_type] = value
        return reported

    def _can_capture(self, channel: AngleChannel, now: float) -> bool:
        return (
            channel.filter.is_full
            and now - self._epoch_start >= self.settings.delay_sec
        )

    def reset(self, now: float) -> None:
        """
        Start a new calibration epoch.

        Clears every baseline, smoothing history and last value.

        Args:
            now: Start time of the new epoch, in seconds.
        """
        self.engine.reset()
        self._epoch_start = now
        self._epoch_count += 1
        logger.info(f"Calibration reset (epoch {self._epoch_count})")

    def readings(self) -> AngleReadings:
        """Get the last reported value of every channel."""
        return AngleReadings(**{
            channel.key: channel.last_value
            for channel in self.engine.channels.values()
        })

    def baselines(self) -> dict[str, Optional[float]]:
        """Get the captured baseline of every channel."""
        return {
            channel.key: channel.baseline
            for channel in self.engine.channels.values()
        }

    def calibration_progress(self, side: HandSide) -> float:
        """
        Fraction of the smoothing window filled on a side's least-filled channel.

        Returns:
            Value in [0, 1]; 1.0 once every channel on that side is full.
        """
        fractions = [
            min(1.0, len(channel.filter) / channel.filter.window_size)
            for (angle_type, channel_side), channel in self.engine.channels.items()
            if channel_side is side
        ]
        return min(fractions)

    @property
    def is_calibrated(self) -> bool:
        """True once any channel on either hand has a baseline."""
        return any(channel.baseline is not None for channel in self.engine.channels.values())

    @property
    def epoch_start(self) -> float:
        """Start time of the current epoch, in seconds."""
        return self._epoch_start

    @property
    def epoch_count(self) -> int:
        """Number of epochs started so far, including the first."""
        return self._epoch_count
