from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> None:
    """Attach one stdout handler to the package logger.

    Safe to call more than once (app factory runs per test).
    """
    root = logging.getLogger("hr_records")
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    if any(getattr(h, "_hr_records", False) for h in root.handlers):
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler._hr_records = True  # type: ignore[attr-defined]
    root.addHandler(handler)
