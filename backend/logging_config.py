"""Logging setup shared by the API server and the simulation it hosts."""

from __future__ import annotations

import logging
import os
from typing import Dict, Iterable, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATEFMT = "%H:%M:%S"

APP_LOGGER = "sparkling.backend"

# Per-subtree overrides, read from the environment when set
SUBSYSTEM_LEVEL_ENV = {
    "sparkling.inference": "SPARKLING_INFERENCE_LOG_LEVEL",
    "sparkling.simulation": "SPARKLING_SIMULATION_LOG_LEVEL",
}

# httpx logs every request at INFO; remote inference would flood the log
NOISY_LOGGERS = ("httpx", "httpcore")


def _subsystem_levels(default: str) -> Dict[str, str]:
    levels = {}
    for name, env_var in SUBSYSTEM_LEVEL_ENV.items():
        levels[name] = (os.getenv(env_var) or default).upper()
    return levels


def configure_logging(
    *,
    level: Optional[str] = None,
    extra_loggers: Optional[Iterable[str]] = None,
    quiet_http_clients: bool = True,
) -> logging.Logger:
    """Configure logging for the server process.

    ``SPARKLING_LOG_LEVEL`` sets the base level (INFO when unset). The
    inference and simulation subtrees can be raised or lowered on their own,
    and uvicorn's loggers follow the base level.

    Returns:
        The backend application logger.
    """
    resolved = (level or os.getenv("SPARKLING_LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT, datefmt=LOG_DATEFMT)

    names = ["uvicorn", "uvicorn.error", APP_LOGGER]
    names.extend(extra_loggers or ())
    for name in names:
        logging.getLogger(name).setLevel(resolved)

    for name, subsystem_level in _subsystem_levels(resolved).items():
        logging.getLogger(name).setLevel(subsystem_level)

    if quiet_http_clients:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    app_logger = logging.getLogger(APP_LOGGER)
    app_logger.debug("Logging configured at %s", resolved)
    return app_logger
