"""Logging configuration for crmlight.

Everything the app logs goes under the ``crmlight`` logger. At -vv the
HTTP client used for AI reports is traced into the same handlers.
"""

import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

from . import __version__

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that follow the app's handlers at DEBUG verbosity
TRACED_LOGGERS = ("httpx",)


def setup_logging(verbose: int = 0, log_file: Path | None = None) -> None:
    """Configure logging based on verbosity level and optional file output.

    Args:
        verbose: Verbosity level (0=off, 1=INFO, 2+=DEBUG and HTTP traces)
        log_file: Optional path to write logs to file
    """
    if verbose == 0 and log_file is None:
        return

    level = logging.DEBUG if verbose >= 2 else logging.INFO
    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handlers: list[logging.Handler] = []
    # stderr only when asked for; the TUI owns stdout
    if verbose > 0:
        handlers.append(logging.StreamHandler(sys.stderr))
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logger = logging.getLogger("crmlight")
    logger.setLevel(level)
    for handler in handlers:
        logger.addHandler(handler)

    if verbose >= 2:
        for name in TRACED_LOGGERS:
            traced = logging.getLogger(name)
            traced.setLevel(logging.INFO)
            for handler in handlers:
                traced.addHandler(handler)

    timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S UTC")
    logger.info("=" * 60)
    logger.info(
        "crmlight %s starting | %s | level=%s",
        __version__,
        timestamp,
        logging.getLevelName(level),
    )
    logger.info("=" * 60)
