"""Logging setup for the sweep CLI using rich handlers."""
from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

from rich.console import Console
from rich.logging import RichHandler

LOG_FILE_ENV = "SUBNETSWEEP_LOG_FILE"


def setup_logging(
    level: int = logging.INFO,
    log_file: str | None = None,
    *,
    console: Console | None = None,
) -> None:
    """Configure standard logging with RichHandler and optional file output.

    Parameters
    ----------
    level:
        Minimum logging severity. Defaults to ``logging.INFO``.
    log_file:
        Optional path to a log file. If provided, a ``RotatingFileHandler``
        writes plain text records next to the console output. When ``None``
        the ``SUBNETSWEEP_LOG_FILE`` environment variable is consulted.
    console:
        Console shared with the reporter so log lines and progress output
        do not interleave badly. A stderr console is used when omitted.
    """
    if log_file is None:
        log_file = os.getenv(LOG_FILE_ENV)

    handlers: list[logging.Handler] = [
        RichHandler(
            console=console or Console(stderr=True),
            rich_tracebacks=True,
            markup=False,
            show_path=False,
        )
    ]

    if log_file:
        file_handler = RotatingFileHandler(log_file, maxBytes=5_000_000, backupCount=5)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)s] %(threadName)s %(name)s: %(message)s"
            )
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        handlers=handlers,
        format="%(message)s",
        force=True,
    )


__all__ = ["LOG_FILE_ENV", "setup_logging"]
