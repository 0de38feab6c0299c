# infrastructure/logging/log_setup.py
from typing import Any, Callable, Optional

from loguru import logger


def setup_console_logging(level: str = "INFO", sink: Optional[Callable[[Any], None]] = None) -> int:
    """
    Replace loguru's handlers with one console sink at the given level.
    Returns the handler id.
    """
    logger.remove()
    return logger.add(sink or (lambda msg: print(msg, end="")), level=level.upper())
