"""
Logging setup shared by the CLI and the API.

Modules log through logging.getLogger(__name__); only entry points call
setup_logging().
"""

from __future__ import annotations
import logging

from .config import EIGHTS_LOG_LEVEL


def setup_logging(level: str = EIGHTS_LOG_LEVEL) -> None:
    """Call once at program start."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
