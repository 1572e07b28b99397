"""
Collect labelled captcha samples from the live portal.

Each round solves one captcha and submits it. When the portal answers with its
success message, the image is saved as captcha_<solution>.jpg so it can be used
by the golden tests in tests/data/.
"""
import os
import logging
from typing import Callable, Optional, Tuple

import requests

from config import AppSettings, get_model_path, settings as default_settings
from models.detection import Detector
from models.errors import DecodeError, InvalidImage, PortalSolverError, TooManyAttempts
from portal.client import PortalClient
from solvers.decoder import decode
from utils.determinism import set_seed
from utils.logger import setup_logging

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Rozłącz i ponownie połącz się z Internetem."


def solve_one(client: PortalClient, detector: Detector, settings: AppSettings) -> Tuple[str, bytes]:
    """Decode captchas for a fresh session until one yields a solution, then submit it."""
    state = client.fetch_state()

    for tries in range(1, settings.max_attempts + 1):
        logger.info(f"Trying to solve captcha (try {tries})")
        captcha = client.fetch_challenge(state.session_id)
        try:
            solution = decode(
                detector.detect(captcha),
                settings.confidence_threshold,
                settings.expected_length,
            )
        except (DecodeError, InvalidImage) as e:
            logger.info(f"Error while solving captcha: {e}")
            continue

        logger.info(f"Captcha solved as {solution} after {tries}")
        result = client.submit(state.session_id, solution)
        if result.status_message != SUCCESS_MESSAGE:
            raise PortalSolverError(f"Captcha rejected with message: {result.status_message or ''}")
        return solution, captcha

    raise TooManyAttempts(settings.max_attempts)


def save_sample(output_dir: str, solution: str, captcha: bytes) -> str:
    path = os.path.join(output_dir, f"captcha_{solution}.jpg")
    with open(path, "wb") as f:
        f.write(captcha)
    return path


def collect(
    detector: Detector,
    settings: AppSettings,
    target: int = 10,
    output_dir: str = "./tests/data",
    max_rounds: Optional[int] = None,
    client_factory: Optional[Callable[[AppSettings], PortalClient]] = None,
) -> int:
    """
    Keep solving until ``target`` samples are saved. Returns the number saved.
    ``max_rounds`` bounds the number of tries, successful or not.
    """
    client_factory = client_factory or (lambda s: PortalClient(s.portal_base_url, s.user_agent, s.request_timeout))
    os.makedirs(output_dir, exist_ok=True)

    saved = 0
    rounds = 0
    while saved < target and (max_rounds is None or rounds < max_rounds):
        rounds += 1
        try:
            with client_factory(settings) as client:
                solution, captcha = solve_one(client, detector, settings)
        except (PortalSolverError, requests.RequestException) as e:
            logger.warning(f"Error: {e}")
            continue

        path = save_sample(output_dir, solution, captcha)
        saved += 1
        logger.info(f"Captcha solved, code: {solution} ({saved}/{target}, saved to {path})")

    return saved


if __name__ == "__main__":
    setup_logging(default_settings.log_level, default_settings.log_file)
    set_seed(default_settings.random_seed)

    from solvers.detector import YoloDetector

    collect(
        YoloDetector(
            get_model_path(),
            labels_path=default_settings.labels_file,
            detection_threshold=default_settings.detection_threshold,
            iou_threshold=default_settings.iou_threshold,
        ),
        default_settings,
    )
