from __future__ import annotations

"""Logging setup.

CONTRACT
- Inputs: verbosity flag
- Outputs:
  - A loguru logger bound for this run, writing leveled lines to stderr
- Invariants:
  - Replaces any previously installed sinks (safe to call more than once)
  - Every record carries a `stage` extra (defaults to "main")
"""

import sys
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger

LOG_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> <level>{level: <7}</level> "
    "<cyan>{extra[stage]}</cyan> {message}"
)


def configure_logging(verbose: bool = False) -> Logger:
    level = "DEBUG" if verbose else "INFO"
    logger.configure(
        handlers=[{"sink": sys.stderr, "level": level, "format": LOG_FORMAT}],
        extra={"stage": "main"},
    )
    return logger.bind(stage="main")
