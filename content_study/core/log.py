from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Attach a console handler to the package logger once."""

    logger = logging.getLogger("content_study")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if any(getattr(handler, "_content_study", False) for handler in logger.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._content_study = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
