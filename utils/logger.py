"""
Logging setup for the portal captcha solver.

Modules log through ``logging.getLogger(__name__)``; this configures the
handlers once for the whole process.
"""

import logging
from logging.handlers import RotatingFileHandler
from typing import Optional, Union


def get_log_level(level: Union[str, int]) -> int:
    """Convert a level name such as 'debug' to its logging constant, INFO if unknown."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: Union[str, int] = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure console logging and, optionally, a rotating log file.

    Args:
        level: Logging level name or constant
        log_file: Path of a log file (10MB max, 5 backups). None for console only.

    Returns:
        The configured root logger
    """
    log_level = get_log_level(level)
    root = logging.getLogger()
    root.setLevel(log_level)

    # Prevent adding handlers multiple times
    if getattr(root, "_portal_solver_configured", False):
        return root

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if log_file:
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # ultralytics and urllib3 are chatty at INFO
    for noisy in ("ultralytics", "urllib3"):
        logging.getLogger(noisy).setLevel(max(log_level, logging.WARNING))

    root._portal_solver_configured = True
    return root
