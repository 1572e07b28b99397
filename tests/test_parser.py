"""Tests for portal page parsing."""

import pytest

from models.errors import MissingSessionId, ParseError
from portal.parser import parse_page

CHALLENGE_PAGE = """
<HTML><BODY>
<FORM method="post" action="/">
  <INPUT type="hidden" name="PHPSESSID" value="k3p9q2r1s0">
  <INPUT type="hidden" name="viewForm" value="true">
  <IMG id="captcha" src="getCaptcha.html?PHPSESSID=k3p9q2r1s0">
  <INPUT type="text" name="captcha">
</FORM>
<TABLE><TR>
  <TD align=center><DIV class="error">
      Nieprawidłowy kod.
  </DIV></TD>
</TR></TABLE>
</BODY></HTML>
"""

FREE_PAGE = """
<html><body>
<form><input type="hidden" name="PHPSESSID" value="abc"></form>
<table><tr><td align="center"><p>Internet access is active</p></td></tr></table>
</body></html>
"""


class TestSessionId:
    """PHPSESSID is mandatory."""

    def test_extracts_session_id(self):
        assert parse_page(CHALLENGE_PAGE).session_id == "k3p9q2r1s0"

    def test_value_is_forwarded_verbatim(self):
        page = '<input name="PHPSESSID" value=" a+b/c= ">'
        assert parse_page(page).session_id == " a+b/c= "

    @pytest.mark.parametrize("page", [
        "",
        "<html><body>Service unavailable</body></html>",
        '<div id="captcha"></div><td align="center"><div>msg</div></td>',
        '<input name="PHPSESSID">',
        '<input name="PHPSESSID" value="">',
        '<input name="SESSID" value="abc"><div id="captcha"></div>',
    ])
    def test_missing_session_id(self, page):
        with pytest.raises(MissingSessionId):
            parse_page(page)

    def test_missing_session_id_is_parse_error(self):
        with pytest.raises(ParseError):
            parse_page("<p>nothing here</p>")


class TestChallengePresence:
    """Presence of the #captcha element, nothing more."""

    def test_challenge_present(self):
        assert parse_page(CHALLENGE_PAGE).challenge_present is True

    def test_challenge_absent(self):
        assert parse_page(FREE_PAGE).challenge_present is False

    def test_empty_container_still_counts(self):
        page = '<input name="PHPSESSID" value="x"><span id="captcha"></span>'
        assert parse_page(page).challenge_present is True


class TestStatusMessage:
    """Optional status text from a div inside a centered cell."""

    def test_message_is_stripped(self):
        assert parse_page(CHALLENGE_PAGE).status_message == "Nieprawidłowy kod."

    def test_no_message_block_gives_none(self):
        assert parse_page(FREE_PAGE).status_message is None

    def test_no_table_gives_none(self):
        assert parse_page('<input name="PHPSESSID" value="x">').status_message is None

    def test_div_outside_centered_cell_is_ignored(self):
        page = """
        <input name="PHPSESSID" value="x">
        <div>Header</div>
        <table><tr><td align="left"><div>Left cell</div></td></tr></table>
        """
        assert parse_page(page).status_message is None

    def test_nested_div_is_found(self):
        page = """
        <input name="PHPSESSID" value="x">
        <table><tr><td align="center"><p><span><div>Deep <b>text</b></div></span></p></td></tr></table>
        """
        assert parse_page(page).status_message == "Deep text"

    def test_first_matching_cell_wins(self):
        page = """
        <input name="PHPSESSID" value="x">
        <table><tr>
          <td align="center"><img src="logo.png"></td>
          <td align="center"><div>Second</div></td>
          <td align="center"><div>Third</div></td>
        </tr></table>
        """
        assert parse_page(page).status_message == "Second"


class TestRawBytes:
    """Pages handed over as bytes."""

    MESSAGE = "Rozłącz i ponownie połącz się z Internetem."

    def page(self, meta=""):
        return (
            f'{meta}<input name="PHPSESSID" value="abc">'
            f"<table><tr><td align=center><div>{self.MESSAGE}</div></td></tr></table>"
        )

    def test_utf8_is_the_default(self):
        assert parse_page(self.page().encode("utf-8")).status_message == self.MESSAGE

    def test_explicit_encoding(self):
        raw = self.page().encode("iso-8859-2")
        assert parse_page(raw, encoding="iso-8859-2").status_message == self.MESSAGE

    def test_meta_charset_for_non_utf8_bytes(self):
        raw = self.page(meta='<meta charset="iso-8859-2">').encode("iso-8859-2")
        assert parse_page(raw).status_message == self.MESSAGE
