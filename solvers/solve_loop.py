"""
Solve loop for one polling cycle.

Polling -> ChallengeActive -> Attempting -> Submitted -> (Resolved | ChallengeActive)

All mutable per-cycle state (current portal state, attempt counter, history)
lives on a SolveCycle instance. Nothing is kept between cycles.
"""

import logging
import threading
import time
from typing import Callable, List, Optional

from config import AppSettings
from models.detection import Detector
from models.errors import CycleAborted, DecodeError, InvalidImage, TooManyAttempts
from models.portal_state import CycleOutcome, CycleReport, PortalState, SolveAttempt
from portal.client import PortalClient
from solvers.decoder import decode

logger = logging.getLogger(__name__)


class SolveCycle:
    """
    Context for one polling cycle.

    The attempt counter resets at the start of every challenge episode, so a
    wrong solution that loops back gets a fresh budget of ``max_attempts``.
    ``attempts`` keeps the full history across episodes.
    """

    def __init__(
        self,
        client: PortalClient,
        detector: Detector,
        settings: AppSettings,
        sleep: Callable[[float], None] = time.sleep,
        stop_event: Optional[threading.Event] = None,
    ):
        self.client = client
        self.detector = detector
        self.settings = settings
        self.sleep = sleep
        self.stop_event = stop_event

        self.state: Optional[PortalState] = None
        self.was_required = False
        self.tries = 0
        self.attempts: List[SolveAttempt] = []
        self.submissions = 0

    def _check_stop(self) -> None:
        if self.stop_event is not None and self.stop_event.is_set():
            raise CycleAborted(f"Cycle aborted before attempt {self.tries + 1}")

    def _record(self, solution: Optional[str] = None, reason: Optional[str] = None) -> None:
        self.attempts.append(SolveAttempt(attempt_index=self.tries, solution=solution, reason=reason))

    def _resolve(self) -> CycleReport:
        outcome = CycleOutcome.SOLVED if self.was_required else CycleOutcome.NOT_REQUIRED
        status = "Captcha solved" if self.was_required else "Captcha not required"
        if self.state.status_message is not None:
            logger.info(f"{status} with message: {self.state.status_message}")
        else:
            logger.info(status)

        return CycleReport(
            outcome=outcome,
            final_state=self.state,
            attempts=list(self.attempts),
            submissions=self.submissions,
        )

    def _enter_challenge(self) -> None:
        self.was_required = True
        self.tries = 0

        if self.state.status_message is not None:
            logger.warning(
                f"Captcha required with message: {self.state.status_message}. "
                f"Waiting for {self.settings.error_delay} seconds before retrying"
            )
            self.sleep(self.settings.error_delay)
        else:
            logger.info("Captcha required")

    def _attempt(self) -> Optional[str]:
        """One fetch-detect-decode try. Returns the solution, or None if decoding failed."""
        captcha = self.client.fetch_challenge(self.state.session_id)

        try:
            detections = self.detector.detect(captcha)
            solution = decode(
                detections,
                self.settings.confidence_threshold,
                self.settings.expected_length,
            )
        except (DecodeError, InvalidImage) as e:
            logger.info(f"Error while solving captcha: {e}")
            self._record(reason=str(e))
            return None

        logger.info(f"Captcha solved as {solution} after {self.tries}")
        self._record(solution=solution)
        return solution

    def _solve_challenge(self) -> str:
        while True:
            self._check_stop()
            self.tries += 1
            if self.tries > self.settings.max_attempts:
                raise TooManyAttempts(self.settings.max_attempts)

            logger.info(f"Trying to solve captcha (try {self.tries})")
            solution = self._attempt()
            if solution is not None:
                return solution

    def run(self) -> CycleReport:
        self.state = self.client.fetch_state()

        while True:
            if not self.state.challenge_present:
                return self._resolve()

            self._enter_challenge()
            solution = self._solve_challenge()

            self.state = self.client.submit(self.state.session_id, solution)
            self.submissions += 1


def run_cycle(
    client: PortalClient,
    detector: Detector,
    settings: AppSettings,
    sleep: Callable[[float], None] = time.sleep,
    stop_event: Optional[threading.Event] = None,
) -> CycleReport:
    """Run one polling cycle to completion. Transport and parse errors propagate."""
    return SolveCycle(client, detector, settings, sleep=sleep, stop_event=stop_event).run()
