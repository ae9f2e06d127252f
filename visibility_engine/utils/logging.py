"""
Logging Setup

Configures stdout logging for the scanner and quiets chatty HTTP loggers.
"""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging.

    Args:
        level: Log level name (defaults to LOG_LEVEL from settings)
    """
    if level is None:
        from .config import get_settings
        level = get_settings().LOG_LEVEL

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stdout,
        force=True,
    )

    # Quiet down chatty loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("anthropic").setLevel(logging.WARNING)
