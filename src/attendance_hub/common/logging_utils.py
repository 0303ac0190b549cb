from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def configure_logging(level: str | int = logging.INFO) -> logging.Logger:
    """Attach a single stream handler to the package logger.

    Safe to call more than once (create_app runs per test).
    """
    logger = logging.getLogger("attendance_hub")
    logger.setLevel(level)

    if not any(getattr(h, "_attendance_hub", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._attendance_hub = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    return logger
