from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional


def configure_logging(
    level: int = logging.INFO,
    log_path: Optional[str] = None,
    also_console: bool = True,
) -> Optional[str]:
    """Configure logging once for the process.

    Every record carries the emitting module's logger name, so lines read
    like `... WARNING xunlei_installer.lib.systemd: ...`.

    When a log file is requested but cannot be opened (read-only /var/log,
    no privileges) we keep going with the console only and say so.

    Returns the log file actually in use, if any.
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_xunlei_configured", False):
        return getattr(logger, "_xunlei_log_path", None)

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handlers: list[logging.Handler] = []
    chosen_path: Optional[str] = None
    file_error: Optional[OSError] = None

    if log_path:
        try:
            Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path)
            file_handler.setFormatter(fmt)
            handlers.append(file_handler)
            chosen_path = log_path
        except OSError as e:
            file_error = e

    if also_console or not handlers:
        console = logging.StreamHandler()
        console.setFormatter(fmt)
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_xunlei_configured", True)
    setattr(logger, "_xunlei_log_path", chosen_path)

    log = logging.getLogger(__name__)
    if file_error is not None:
        log.warning("Cannot open log file %s (%s); logging to console only", log_path, file_error)
    log.debug("Logging initialized (level=%s, file=%s)", logging.getLevelName(level), chosen_path)
    return chosen_path
