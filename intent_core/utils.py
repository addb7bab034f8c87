"""
Utility functions shared across IntentGuard.
Contains helpers for logging setup, token hygiene and file naming.
"""

import logging
import os
import re
from typing import Optional

_BEARER = re.compile(r"^\s*bearer(?:\s+|$)", re.IGNORECASE)

_SAFE_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """
    Set up logging configuration for IntentGuard.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path

    Returns:
        Configured logger
    """
    logger = logging.getLogger("intent_core")
    logger.setLevel(getattr(logging, log_level.upper()))

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, log_level.upper()))
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(getattr(logging, log_level.upper()))
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def strip_bearer(token: Optional[str]) -> Optional[str]:
    """Remove a leading 'Bearer' transport scheme from a token; empty when nothing follows it."""
    if not token:
        return token
    return _BEARER.sub("", token, count=1).strip()


def bearer_credentials(authorization: Optional[str]) -> Optional[str]:
    """Token from an Authorization header, or None when it uses another scheme."""
    if not authorization or not _BEARER.match(authorization):
        return None
    return strip_bearer(authorization) or None


def mask_token(token: Optional[str], visible: int = 6) -> str:
    """Render a token for logs without leaking it."""
    if not token:
        return "<none>"
    return f"{token[:visible]}... (len={len(token)})"


def is_safe_filename(name: Optional[str]) -> bool:
    """True when `name` can be used as a single file name under a directory."""
    return bool(name) and bool(_SAFE_NAME.match(name)) and ".." not in name
