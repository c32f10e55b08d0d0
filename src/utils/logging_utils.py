"""Logging setup helpers."""

from __future__ import annotations

import logging
from pathlib import Path


def setup_logging(
    level: int = logging.INFO,
    *,
    log_dir: Path | None = None,
    log_file: str = "envelopes.log",
    fmt: str | None = None,
) -> logging.Logger:
    """Configure root logging to the console and, optionally, a log file under ``log_dir``."""

    # Clear existing handlers to avoid duplicate logs
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(level)

    formatter = logging.Formatter(
        fmt or "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        root.addHandler(file_handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    stream_handler.setLevel(level)
    root.addHandler(stream_handler)

    logger = logging.getLogger("envelopes")
    logger.propagate = True
    logger.setLevel(level)
    return logger
