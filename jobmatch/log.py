"""Logging for the jobmatch package: console plus an optional daily file."""
from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path

PACKAGE_LOGGER = "jobmatch"

_LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"
_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package namespace; configures it on first call."""
    if not _configured:
        configure()
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def _file_logging_enabled() -> bool:
    return os.environ.get("JOBMATCH_LOG_FILE", "true").lower() in ("1", "true", "yes")


def configure(level: str | None = None, log_file: bool | None = None) -> None:
    """Set up the package logger.

    *level* defaults to ``JOBMATCH_LOG_LEVEL`` (INFO) and *log_file* to
    ``JOBMATCH_LOG_FILE`` (on). Calling it again replaces the handlers.
    When the host application already configured the root logger, records
    propagate there and no handlers are added.
    """
    global _configured
    _configured = True

    level_name = (level or os.environ.get("JOBMATCH_LOG_LEVEL", "INFO")).upper()
    numeric = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(numeric)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if logging.getLogger().handlers:
        logger.propagate = True
        return
    logger.propagate = False

    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FMT)
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(numeric)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if not (_file_logging_enabled() if log_file is None else log_file):
        return
    try:
        _LOG_DIR.mkdir(parents=True, exist_ok=True)
        path = _LOG_DIR / f"jobmatch_{datetime.now().strftime('%Y-%m-%d')}.log"
        fh = logging.FileHandler(path, encoding="utf-8")
    except OSError as exc:
        logger.warning("File logging disabled: %s", exc)
        return
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(formatter)
    logger.addHandler(fh)
