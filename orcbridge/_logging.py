"""Logging configuration for orcbridge.

HiveQL statements are multi-line and can be long; log and error messages
carry a one-line summary of them (see summarize()). The full text is only
logged at DEBUG.
"""

import logging

DEFAULT_FORMAT = "%(levelname)s [%(name)s] %(message)s"
SUMMARY_WIDTH = 120


def get_logger(name: str) -> logging.Logger:
    """Get logger for orcbridge module."""
    if not name.startswith("orcbridge"):
        name = "orcbridge" if name == "__main__" else f"orcbridge.{name}"
    return logging.getLogger(name)


def summarize(statement: str, width: int = SUMMARY_WIDTH) -> str:
    """First non-blank line of a statement, cut to width."""
    line = next((line.strip() for line in statement.splitlines() if line.strip()), "")
    if len(line) > width:
        return line[: width - 3] + "..."
    return line


def setup_basic_logging(level: int = logging.INFO, fmt: str | None = None) -> None:
    """Send orcbridge records to stderr at the given level."""
    if fmt is None:
        fmt = DEFAULT_FORMAT

    logger = logging.getLogger("orcbridge")
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(fmt))
        logger.addHandler(handler)

    logger.propagate = False


def disable_logging() -> None:
    """Silence orcbridge logging."""
    logging.getLogger("orcbridge").setLevel(logging.CRITICAL + 1)
