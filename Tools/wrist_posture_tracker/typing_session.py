"""
Keystroke session recording on top of the pipeline's query surface.

Attributes each key press to a finger, snapshots the current wrist
angles with it, and summarizes the session (average angles, finger
usage, finger travel). Text scoring stays with the caller.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .calibration import AngleReadings
from .finger_map import resolve_finger
from .landmarks import AngleType, FingerLabel, HandSide
from .logger import get_logger
from .pipeline import WristPosturePipeline

logger = get_logger("TypingSession")


@dataclass
class KeystrokeSnapshot:
    """One key press with the finger and wrist angles at that moment."""
    key: str
    finger: FingerLabel
    timestamp: float
    angles: AngleReadings
    is_correct: bool = True
    shifted: bool = False
    detected: bool = False  # True if finger came from movement, not the key map

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "finger": self.finger.value,
            "timestamp": self.timestamp,
            "isCorrect": self.is_correct,
            "shifted": self.shifted,
            "detected": self.detected,
            **self.angles.to_dict(),
        }


@dataclass
class TypingSession:
    """
    Records keystrokes against a running pipeline.

    Usage:
        session = TypingSession(pipeline)
        session.start()
        session.record_keystroke("a")
        ...
        session.finish()
        print(session.summary())
    """
    pipeline: WristPosturePipeline
    clock: Callable[[], float] = time.time
    keystrokes: list[KeystrokeSnapshot] = field(default_factory=list)
    start_time: Optional[float] = None
    end_time: Optional[float] = None

    def start(self) -> None:
        """Reset the pipeline for a fresh measurement and activate the session."""
        self.keystrokes.clear()
        self.pipeline.reset()
        self.pipeline.set_session_active(True)
        self.start_time = self.clock()
        self.end_time = None
        logger.info("Typing session started")

    def record_keystroke(
        self,
        key: str,
        is_correct: bool = True,
        shifted: bool = False
    ) -> KeystrokeSnapshot:
        """
        Record one key press.

        Args:
            key: Key name or character.
            is_correct: Whether the caller scored the key as correct.
            shifted: Whether shift was held.

        Returns:
            The recorded snapshot.
        """
        now = self.clock()
        detected = self.pipeline.detect_pressing_finger(now)
        snapshot = KeystrokeSnapshot(
            key=key,
            finger=resolve_finger(key, detected),
            timestamp=now,
            angles=self.pipeline.get_angles(),
            is_correct=is_correct,
            shifted=shifted,
            detected=detected.is_known
        )
        self.keystrokes.append(snapshot)
        return snapshot

    def finish(self) -> None:
        """Stop accumulating finger travel."""
        self.pipeline.set_session_active(False)
        self.end_time = self.clock()
        logger.info(f"Typing session finished ({len(self.keystrokes)} keystrokes)")

    def finger_usage(self) -> dict[str, int]:
        """Count keystrokes per finger, including fingers never used."""
        usage = {label.value: 0 for label in FingerLabel if label.is_known}
        for snapshot in self.keystrokes:
            usage[snapshot.finger.value] = usage.get(snapshot.finger.value, 0) + 1
        return usage

    def average_angles(self) -> AngleReadings:
        """Mean of each channel over keystrokes where it had a value."""
        averages = {}
        for angle_type in AngleType:
            for side in HandSide:
                values = [
                    value for value in (s.angles.get(angle_type, side) for s in self.keystrokes)
                    if value is not None
                ]
                key = f"{side.value}_{angle_type.value}"
                averages[key] = sum(values) / len(values) if values else None
        return AngleReadings(**averages)

    @property
    def duration(self) -> Optional[float]:
        """Elapsed seconds since start, up to finish if finished."""
        if self.start_time is None:
            return None
        end = self.end_time if self.end_time is not None else self.clock()
        return end - self.start_time

    def summary(self) -> dict[str, Any]:
        """Build a serializable session summary."""
        travel = self.pipeline.get_finger_travel()
        return {
            "keystrokes": len(self.keystrokes),
            "errors": sum(1 for s in self.keystrokes if not s.is_correct),
            "durationSec": self.duration,
            "averageAngles": self.average_angles().to_dict(),
            "fingerUsage": self.finger_usage(),
            "fingerTravel": {"left": travel.left, "right": travel.right},
        }
