"""Centralized logging setup for the artifact ingestion system.

Every module logs through a named stdlib logger; this module installs a
single stdout handler on the root logger and keeps the HTTP client
libraries used by the language-model adapter from flooding it.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party clients that log every request at INFO.
_HTTP_CLIENT_LOGGERS = ("httpx", "httpcore", "openai")


def _quiet_http_clients(root_level: int) -> None:
    """Raise the HTTP client loggers to WARNING unless debugging."""
    if root_level <= logging.DEBUG:
        return
    for name in _HTTP_CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_logging(level: str = "INFO") -> None:
    """Install the stdout handler used by the API server and the CLI.

    Calling this more than once is a no-op, so both entry points can
    invoke it unconditionally.

    Args:
        level: Logging level name from ``AppConfig.log_level``. Unknown
            names fall back to INFO.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    root_level = getattr(logging, level.upper(), logging.INFO)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(handler)
    root.setLevel(root_level)
    _quiet_http_clients(root_level)


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a pipeline module (pass ``__name__``)."""
    return logging.getLogger(name)
