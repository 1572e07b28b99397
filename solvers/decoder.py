from typing import Iterable

from models.detection import Detection
from models.errors import LengthMismatch


def decode(detections: Iterable[Detection], min_confidence: float, expected_length: int) -> str:
    """
    Turn an unordered set of glyph detections into the captcha solution.

    Detections below ``min_confidence`` are dropped. The survivors must number
    exactly ``expected_length``; otherwise LengthMismatch is raised and nothing
    is returned. Labels are read left to right by the box's left edge.
    """
    if not 0.0 <= min_confidence <= 1.0:
        raise ValueError(f"min_confidence must be between 0.0 and 1.0, got {min_confidence}")
    if expected_length < 0:
        raise ValueError(f"expected_length must be non-negative, got {expected_length}")

    confident = [det for det in detections if det.confidence >= min_confidence]

    if len(confident) != expected_length:
        raise LengthMismatch(expected_length, len(confident))

    # stable: equal x keeps detector order
    confident.sort(key=lambda det: det.bbox.x)

    return "".join(det.label for det in confident)
