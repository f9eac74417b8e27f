"""
Static QWERTY key to finger map.

Used as the fallback when movement-based press detection cannot tell
which finger pressed a key.
"""

from typing import Final

from .landmarks import FingerLabel

L_PINKY = FingerLabel.L_PINKY
L_RING = FingerLabel.L_RING
L_MIDDLE = FingerLabel.L_MIDDLE
L_INDEX = FingerLabel.L_INDEX
L_THUMB = FingerLabel.L_THUMB
R_THUMB = FingerLabel.R_THUMB
R_INDEX = FingerLabel.R_INDEX
R_MIDDLE = FingerLabel.R_MIDDLE
R_RING = FingerLabel.R_RING
R_PINKY = FingerLabel.R_PINKY

QWERTY_FINGER_MAP: Final[dict[str, FingerLabel]] = {
    # Left hand
    "q": L_PINKY, "w": L_RING, "e": L_MIDDLE, "r": L_INDEX, "t": L_INDEX,
    "a": L_PINKY, "s": L_RING, "d": L_MIDDLE, "f": L_INDEX, "g": L_INDEX,
    "z": L_PINKY, "x": L_RING, "c": L_MIDDLE, "v": L_INDEX, "b": L_INDEX,
    "1": L_PINKY, "2": L_RING, "3": L_MIDDLE, "4": L_INDEX, "5": L_INDEX,
    "`": L_PINKY,

    # Right hand
    "y": R_INDEX, "u": R_INDEX, "i": R_MIDDLE, "o": R_RING, "p": R_PINKY,
    "h": R_INDEX, "j": R_INDEX, "k": R_MIDDLE, "l": R_RING, ";": R_PINKY,
    "n": R_INDEX, "m": R_INDEX, ",": R_MIDDLE, ".": R_RING, "/": R_PINKY,
    "6": R_INDEX, "7": R_INDEX, "8": R_MIDDLE, "9": R_RING, "0": R_PINKY,
    "-": R_PINKY, "=": R_PINKY, "[": R_PINKY, "]": R_PINKY, "\\": R_PINKY,
    "'": R_PINKY,

    # Thumbs
    " ": R_THUMB,

    # Modifier keys
    "shift": L_PINKY,
    "control": L_PINKY,
    "alt": L_THUMB,
    "meta": L_THUMB,
    "capslock": L_PINKY,
    "backspace": R_RING,
}


def lookup_finger(key: str) -> FingerLabel:
    """Get the assumed finger for a key (case-insensitive), UNKNOWN if unmapped."""
    return QWERTY_FINGER_MAP.get(key.lower(), FingerLabel.UNKNOWN)


def resolve_finger(key: str, detected: FingerLabel) -> FingerLabel:
    """
    Combine detected and assumed finger for a key press.

    Args:
        key: Key name or character, e.g. "a", "Shift", " ".
        detected: Result of movement-based detection.

    Returns:
        The detected finger when known, otherwise the map's finger.
    """
    if detected.is_known:
        return detected
    return lookup_finger(key)
