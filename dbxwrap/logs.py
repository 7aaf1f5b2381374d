"""Logging setup for dbxwrap.

Library modules only ever call logging.getLogger("dbxwrap"); handlers are
attached here, once, by the CLI.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def configure_logging(verbose: bool = False, log_path: Optional[Path] = None) -> logging.Logger:
    """Configure root logging and return the "dbxwrap" logger.

    Records go to log_path when one is given. Verbose mode lowers the level
    to DEBUG and also echoes records to stderr.
    """
    handlers: list[logging.Handler] = []
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))
    handlers.append(logging.StreamHandler() if verbose else logging.NullHandler())

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )

    log = logging.getLogger("dbxwrap")
    if verbose:
        log.debug(f"Logging configured: verbose={verbose}, log_path={log_path}")
    return log
