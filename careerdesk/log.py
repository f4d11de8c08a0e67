"""Process-wide logging: stdout plus one dated file per day under logs/."""
from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path

_DEFAULT_LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"

# Chatty third-party loggers kept at WARNING unless LOG_LEVEL=DEBUG
_NOISY = ("httpx", "httpcore", "openai", "urllib3", "sqlalchemy.engine")

_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a named logger; the root logger is set up on the first call."""
    global _configured
    if not _configured:
        _configure()
        _configured = True
    return logging.getLogger(name)


def _formatter() -> logging.Formatter:
    return logging.Formatter(_FORMAT, datefmt=_DATE_FMT)


def _file_handler() -> logging.Handler | None:
    if os.environ.get("LOG_TO_FILE", "true").lower() not in ("1", "true", "yes"):
        return None
    log_dir = Path(os.environ.get("LOG_DIR") or _DEFAULT_LOG_DIR)
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(
            log_dir / f"careerdesk_{datetime.now():%Y-%m-%d}.log", encoding="utf-8",
        )
    except OSError:
        return None
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(_formatter())
    return fh


def _configure() -> None:
    level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)

    if level > logging.DEBUG:
        for name in _NOISY:
            logging.getLogger(name).setLevel(logging.WARNING)

    if root.handlers:
        return

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(_formatter())
    root.addHandler(console)

    fh = _file_handler()
    if fh is not None:
        root.addHandler(fh)
