"""Logging helpers shared by every fleetledger module."""

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


class _ConsoleHandler(logging.StreamHandler):
    """Stream handler that writes to whatever sys.stderr is at emit time."""

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value):
        pass


def configure_logging(level: str = "INFO") -> None:
    """Install the console handler on the root logger once.

    Library callers normally leave handler setup to the host application;
    the CLI calls this at startup. Later calls only change the level.
    """
    global _configured
    root = logging.getLogger()
    root.setLevel(level.upper())
    if _configured:
        return
    _configured = True

    console = _ConsoleHandler()
    console.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(console)


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Call this at the top of every module."""
    return logging.getLogger(name)
