# pricewatch/config/logging_config.py

"""Per-run log files for the scheduled price check.

Every invocation writes ``logs/run_YYYYMMDD_HHMMSS.log`` at DEBUG and
echoes warnings and errors to stderr.  Because the checker runs from a
scheduler, old run logs are pruned so that only the newest
``PRICEWATCH_LOG_KEEP`` files remain.

Environment:
    PRICEWATCH_LOG_LEVEL   stderr threshold (default ``WARNING``)
    PRICEWATCH_LOG_KEEP    run logs to keep, ``0`` keeps all (default 30)
"""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path

from pricewatch.config.settings import Settings

LOGGER_NAME = "pricewatch"
RUN_LOG_GLOB = "run_*.log"
DEFAULT_KEEP = 30

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "%(funcName)s:%(lineno)d | %(message)s"
)
_STDERR_FORMAT = "%(levelname)-8s %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty third-party loggers
_QUIET_LOGGERS = ("asyncio", "urllib3", "curl_cffi")


def _level_from_env(default: int = logging.WARNING) -> int:
    raw = os.environ.get("PRICEWATCH_LOG_LEVEL", "").strip().upper()
    level = logging.getLevelName(raw) if raw else default
    return level if isinstance(level, int) else default


def _keep_from_env() -> int:
    raw = os.environ.get("PRICEWATCH_LOG_KEEP", "").strip()
    try:
        return max(int(raw), 0) if raw else DEFAULT_KEEP
    except ValueError:
        return DEFAULT_KEEP


def prune_run_logs(logs_dir: Path, keep: int) -> list[Path]:
    """Delete all but the newest *keep* run logs; return what was removed."""
    if keep <= 0:
        return []
    # Names embed the launch time, so lexical order is chronological
    runs = sorted(logs_dir.glob(RUN_LOG_GLOB))
    stale = runs[:-keep]
    removed: list[Path] = []
    for path in stale:
        try:
            path.unlink()
        except OSError:
            continue
        removed.append(path)
    return removed


def _detach_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def setup_logging(
    logs_dir: Path | None = None,
    console_level: int | None = None,
    keep: int | None = None,
) -> Path:
    """Point the ``pricewatch`` logger at a fresh run log.

    Handlers from an earlier call are closed and replaced, so calling
    this twice never duplicates output.

    Returns:
        The path of this run's log file.
    """
    logs_dir = logs_dir or Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / f"run_{datetime.now():%Y%m%d_%H%M%S}.log"

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    _detach_handlers(logger)

    to_file = logging.FileHandler(log_file, encoding="utf-8")
    to_file.setLevel(logging.DEBUG)
    to_file.setFormatter(logging.Formatter(_FILE_FORMAT, _DATE_FORMAT))
    logger.addHandler(to_file)

    to_stderr = logging.StreamHandler(sys.stderr)
    to_stderr.setLevel(
        _level_from_env() if console_level is None else console_level
    )
    to_stderr.setFormatter(logging.Formatter(_STDERR_FORMAT))
    logger.addHandler(to_stderr)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    removed = prune_run_logs(
        logs_dir, _keep_from_env() if keep is None else keep,
    )
    logger.debug(
        "Run log %s (pruned %d old run log(s))", log_file, len(removed),
    )
    return log_file
