"""
Pydantic models for detector output.
Detections are immutable and produced fresh for every solve attempt.
"""

from typing import Protocol, Sequence

from pydantic import BaseModel, ConfigDict, Field


class BoundingBox(BaseModel):
    """Axis-aligned box, top-left corner plus size, in image pixels."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    width: float = Field(ge=0.0)
    height: float = Field(ge=0.0)

    @classmethod
    def from_xyxy(cls, x_min: float, y_min: float, x_max: float, y_max: float) -> "BoundingBox":
        return cls(x=x_min, y=y_min, width=max(0.0, x_max - x_min), height=max(0.0, y_max - y_min))


class Detection(BaseModel):
    """Single detected glyph: its box, best class label and that class's probability."""
    model_config = ConfigDict(frozen=True)

    bbox: BoundingBox
    label: str
    confidence: float = Field(ge=0.0, le=1.0)


class Detector(Protocol):
    """Anything that turns raw captcha image bytes into glyph detections."""

    def detect(self, image_bytes: bytes) -> Sequence[Detection]:
        ...
