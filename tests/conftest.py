"""
Shared pytest setup.
Run with: pytest tests/
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import AppSettings


@pytest.fixture
def settings():
    """Small, fast settings: no real delays, three-glyph captchas."""
    return AppSettings(
        portal_base_url="http://portal.test/",
        confidence_threshold=0.8,
        expected_length=3,
        max_attempts=5,
        check_delay=10.0,
        error_delay=5.0,
        solved_delay=3300.0,
    )
