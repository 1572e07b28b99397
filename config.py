"""
Configuration module using pydantic-settings for validated environment management.
Every value the solver consumes (portal endpoint, model files, thresholds, delays)
is centralized here and checked once at startup.
"""

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Optional
import os


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/140.0.0.0 Safari/537.36"
)


class AppSettings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all values at startup - fail fast principle.
    """

    # Portal
    portal_base_url: str = Field(default="http://bdi.free.aero2.net.pl:8080/")
    user_agent: str = Field(default=DEFAULT_USER_AGENT)
    request_timeout: float = Field(default=60.0, gt=0.0)

    # Model files - relative paths for portability
    yolo_model_name: str = Field(
        default="captcha.pt",
        description="YOLO weights trained on the portal's captcha glyphs."
    )
    labels_file: Optional[str] = Field(
        default=None,
        description="Optional class names file, one label per line. Defaults to the model's names."
    )

    # Detector-internal thresholds (stable across calls)
    detection_threshold: float = Field(default=0.25, ge=0.0, le=1.0)
    iou_threshold: float = Field(default=0.45, ge=0.0, le=1.0)

    # Decoder
    confidence_threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    expected_length: int = Field(default=8, ge=1)

    # Retry budget and delays (seconds)
    max_attempts: int = Field(default=20, ge=1)
    check_delay: float = Field(default=10.0, ge=0.0)
    error_delay: float = Field(default=5.0, ge=0.0)
    solved_delay: float = Field(default=55 * 60.0, ge=0.0)

    # Determinism
    random_seed: int = Field(default=42, description="Global seed for reproducibility")

    # Logging
    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore unknown env vars


# Singleton instance - load once at startup
settings = AppSettings()


def get_model_path() -> str:
    """
    Returns the resolved path for the YOLO weights.
    Tries the local 'model/' and 'models/' directories first, then the working
    directory, then hands the bare name to ultralytics.
    """
    base_dirs = [
        os.path.join(os.getcwd(), "model"),
        os.path.join(os.getcwd(), "models"),
        os.getcwd(),
    ]
    for base in base_dirs:
        path = os.path.join(base, settings.yolo_model_name)
        if os.path.exists(path):
            return path
    return settings.yolo_model_name
