import logging
from typing import Optional

import requests

from models.portal_state import PortalState
from portal.parser import SESSION_FIELD, parse_page

logger = logging.getLogger(__name__)

CHALLENGE_PATH = "getCaptcha.html"


class PortalClient:
    """
    Thin HTTP client for the three portal operations.

    Redirects are never followed: a redirect on submit is portal feedback and
    its body is parsed like any other page. Connections are not reused, so
    every request reaches the portal as a fresh client. Use one instance per
    polling cycle and close it afterwards.
    """

    def __init__(
        self,
        base_url: str,
        user_agent: str,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url
        self.challenge_url = base_url.rstrip("/") + "/" + CHALLENGE_PATH
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": user_agent,
            "Connection": "close",
        })

    def __enter__(self) -> "PortalClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def _post_form(self, data: dict) -> PortalState:
        response = self.session.post(
            self.base_url,
            data=data,
            timeout=self.timeout,
            allow_redirects=False,
        )
        logger.debug(f"POST {self.base_url} -> {response.status_code}")

        # without a declared charset requests assumes ISO-8859-1; the parser defaults to UTF-8 instead
        declared = "charset" in response.headers.get("Content-Type", "").lower()
        return parse_page(response.content, encoding=response.encoding if declared else None)

    def fetch_state(self) -> PortalState:
        """Ask the portal for its current view, without any session context."""
        return self._post_form({"viewForm": "true"})

    def fetch_challenge(self, session_id: Optional[str] = None) -> bytes:
        """Download the captcha image for a session. The bytes are not inspected."""
        params = {SESSION_FIELD: session_id} if session_id else None
        url = self.challenge_url
        response = self.session.get(
            url,
            params=params,
            timeout=self.timeout,
            allow_redirects=False,
        )
        logger.debug(f"GET {url} -> {response.status_code} ({len(response.content)} bytes)")
        return response.content

    def submit(self, session_id: str, solution: str) -> PortalState:
        """Submit a solution and parse the page the portal answers with."""
        return self._post_form({
            SESSION_FIELD: session_id,
            "viewForm": "true",
            "captcha": solution,
        })
