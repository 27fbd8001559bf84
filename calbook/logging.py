"""Process-wide logging setup for applications embedding calbook."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from calbook.config import get_settings

_INITIALIZED = False


def configure_logging(level: str | None = None, *, log_path: Path | None = None) -> None:
    """Install console (and optional rotating file) handlers on the root logger.

    ``level`` defaults to the configured ``CALBOOK_LOG_LEVEL``.

    Safe to call more than once; only the first call has an effect. Library
    modules only create loggers, they never configure handlers.
    """
    global _INITIALIZED
    if _INITIALIZED:
        return
    if level is None:
        level = get_settings().log_level

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            str(log_path), maxBytes=1_000_000, backupCount=5
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    _INITIALIZED = True
    logging.getLogger(__name__).debug("Logging configured at %s", level.upper())


__all__ = ["configure_logging"]
