"""
Portal page parser.

The portal's HTML is not a stable API, so every selector the solver depends on
lives here. The session id is mandatory; everything else is optional.
"""

from typing import Optional, Union

from bs4 import BeautifulSoup

from models.errors import MissingSessionId
from models.portal_state import PortalState

SESSION_FIELD = "PHPSESSID"
SESSION_SELECTOR = f"input[name={SESSION_FIELD}]"
CHALLENGE_ELEMENT_ID = "captcha"
MESSAGE_CELL_SELECTOR = "td[align=center]"
MESSAGE_BLOCK_TAG = "div"


def _session_id(soup: BeautifulSoup) -> str:
    field = soup.select_one(SESSION_SELECTOR)
    value = field.get("value") if field is not None else None
    if not value:
        raise MissingSessionId()
    return value


def _status_message(soup: BeautifulSoup) -> Optional[str]:
    for cell in soup.select(MESSAGE_CELL_SELECTOR):
        block = cell.find(MESSAGE_BLOCK_TAG)
        if block is not None:
            return block.get_text().strip()
    return None


def parse_page(page: Union[str, bytes], encoding: Optional[str] = None) -> PortalState:
    """
    Parse a portal page into a PortalState.

    Raw bytes are decoded with ``encoding`` when given, otherwise as UTF-8.
    Bytes that are not valid UTF-8 fall back to the page's <meta> charset or
    to detection.

    Raises:
        MissingSessionId: the PHPSESSID input is absent or has no value.
    """
    if isinstance(page, bytes) and encoding is None:
        try:
            page = page.decode("utf-8")
        except UnicodeDecodeError:
            pass

    # html.parser lowercases tag and attribute names, so TD/DIV match too
    if isinstance(page, bytes):
        soup = BeautifulSoup(page, "html.parser", from_encoding=encoding)
    else:
        soup = BeautifulSoup(page, "html.parser")

    return PortalState(
        challenge_present=soup.find(id=CHALLENGE_ELEMENT_ID) is not None,
        session_id=_session_id(soup),
        status_message=_status_message(soup),
    )
