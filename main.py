"""
Polling runner: checks the portal forever and solves captchas when they appear.

Configuration comes from the environment / .env (see config.py).
"""

import logging
import signal
import threading
import time
from typing import Callable, Optional

import requests

from config import AppSettings, get_model_path, settings as default_settings
from models.detection import Detector
from models.errors import CycleAborted, ParseError, TooManyAttempts
from models.portal_state import CycleOutcome
from portal.client import PortalClient
from solvers.solve_loop import run_cycle
from utils.determinism import set_seed
from utils.logger import setup_logging

logger = logging.getLogger(__name__)


def _sleep_time(delay: float) -> float:
    logger.info(f"Sleeping for {delay} seconds")
    return delay


def run_once(
    detector: Detector,
    settings: AppSettings,
    sleep: Callable[[float], None] = time.sleep,
    stop_event: Optional[threading.Event] = None,
    client_factory: Optional[Callable[[AppSettings], PortalClient]] = None,
) -> float:
    """
    Run a single polling cycle with a fresh client and return how long to sleep before the next one.
    """
    client_factory = client_factory or (lambda s: PortalClient(s.portal_base_url, s.user_agent, s.request_timeout))

    try:
        with client_factory(settings) as client:
            report = run_cycle(client, detector, settings, sleep=sleep, stop_event=stop_event)
    except CycleAborted:
        raise
    except TooManyAttempts as e:
        logger.error(f"Error: {e}. The model could not read the captcha")
        return _sleep_time(settings.error_delay)
    except requests.RequestException as e:
        logger.error(f"Error: portal unreachable: {e}")
        return _sleep_time(settings.error_delay)
    except ParseError as e:
        logger.error(f"Error: unexpected portal page: {e}")
        return _sleep_time(settings.error_delay)
    except Exception as e:
        # detector or other unexpected failure: log and keep polling
        logger.exception(f"Error: {e}")
        return _sleep_time(settings.error_delay)

    if report.outcome == CycleOutcome.SOLVED:
        logger.info(f"Solved after {len(report.attempts)} attempts and {report.submissions} submissions")
        return _sleep_time(settings.solved_delay)
    return _sleep_time(settings.check_delay)


def main(settings: AppSettings = default_settings, max_cycles: Optional[int] = None) -> None:
    setup_logging(settings.log_level, settings.log_file)
    set_seed(settings.random_seed)

    # ultralytics is only needed by the real runner
    from solvers.detector import YoloDetector

    detector = YoloDetector(
        get_model_path(),
        labels_path=settings.labels_file,
        detection_threshold=settings.detection_threshold,
        iou_threshold=settings.iou_threshold,
    )

    # SIGTERM stops at the next attempt boundary, never mid-request
    stop_event = threading.Event()
    signal.signal(signal.SIGTERM, lambda signum, frame: stop_event.set())

    cycles = 0
    try:
        while not stop_event.is_set() and (max_cycles is None or cycles < max_cycles):
            delay = run_once(detector, settings, sleep=stop_event.wait, stop_event=stop_event)
            cycles += 1
            stop_event.wait(delay)
    except (KeyboardInterrupt, CycleAborted):
        stop_event.set()
        logger.info("Stopped")


if __name__ == "__main__":
    main()
