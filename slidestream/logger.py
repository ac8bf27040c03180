import logging
import os

from rich.logging import RichHandler


def define_log_level(level: str | None = None, name: str = "slidestream") -> logging.Logger:
    """Configure and return the package logger."""
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    _logger = logging.getLogger(name)
    _logger.setLevel(level)
    if not _logger.handlers:
        handler = RichHandler(rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(name)s - %(message)s"))
        _logger.addHandler(handler)
    _logger.propagate = False
    return _logger


logger = define_log_level()
