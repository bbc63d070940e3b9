"""
Package Logging
===============
Every pharmaflow module logs under the `pharmaflow` namespace. Handlers
live on the namespace root only; module loggers propagate to it, so a
recompute across many modules writes one consistently formatted stream.

Usage:
    from pharmaflow.logger import get_logger
    logger = get_logger(__name__)
    logger.info("Recomputed 12 products")

    configure_logging(level=logging.DEBUG, log_file="logs/pharmaflow.log")
"""

import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Optional

from .constants import LOGGING_CONFIG

ROOT_LOGGER = "pharmaflow"


def _formatter() -> logging.Formatter:
    return logging.Formatter(
        fmt=LOGGING_CONFIG["format"],
        datefmt=LOGGING_CONFIG["date_format"]
    )


def configure_logging(
    level: Optional[int] = None,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Attach handlers to the `pharmaflow` root logger.

    Safe to call repeatedly: the console handler is added once, a file
    handler once per distinct path, and `level` always applies.

    Parameters
    ----------
    level : int, optional
        Logging level. Defaults to LOGGING_CONFIG["level"].
    log_file : str, optional
        Extra file destination. Defaults to LOGGING_CONFIG["log_file"].

    Returns
    -------
    logging.Logger
        The namespace root logger
    """
    root = logging.getLogger(ROOT_LOGGER)
    if level is None:
        level = logging.getLevelName(LOGGING_CONFIG["level"])
    root.setLevel(level)
    root.propagate = False

    console = [
        h for h in root.handlers
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
    ]
    if not console:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(_formatter())
        root.addHandler(handler)

    log_file = log_file or LOGGING_CONFIG.get("log_file")
    if log_file:
        log_path = Path(log_file).resolve()
        known = {
            Path(h.baseFilename) for h in root.handlers
            if isinstance(h, logging.FileHandler)
        }
        if log_path not in known:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding='utf-8')
            file_handler.setFormatter(_formatter())
            root.addHandler(file_handler)

    return root


def get_logger(name: str) -> logging.Logger:
    """
    Logger for a module, placed under the `pharmaflow` namespace.

    Names outside the namespace (tests, scripts) are nested under it so
    they share its handlers.

    Example
    -------
    >>> logger = get_logger(__name__)
    >>> logger.info("Forecast generated")
    2026-02-04 10:30:00 | INFO     | pharmaflow.forecaster | Forecast generated
    """
    if not logging.getLogger(ROOT_LOGGER).handlers:
        configure_logging()

    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


class LogContext:
    """
    Start/finish log lines around a batch operation.

    The block may report how many items it handled through `processed`;
    the completion line includes the count and throughput.

    Usage:
        with LogContext(logger, "Recomputing portfolio") as ctx:
            for product in products:
                ...
                ctx.processed += 1
    """

    def __init__(self, logger: logging.Logger, operation: str):
        self.logger = logger
        self.operation = operation
        self.processed = 0
        self.start_time = None

    def __enter__(self):
        self.start_time = datetime.now()
        self.logger.info(f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = (datetime.now() - self.start_time).total_seconds()

        if exc_type is not None:
            self.logger.error(
                f"Failed: {self.operation} after {self.processed} items "
                f"({elapsed:.2f}s) - {exc_val}"
            )
            return False

        if self.processed and elapsed > 0:
            rate = f", {self.processed / elapsed:.1f}/s"
        else:
            rate = ""
        self.logger.info(
            f"Completed: {self.operation} - {self.processed} items ({elapsed:.2f}s{rate})"
        )
        return False
