"""Logging setup for the lasraster package."""

import logging
import sys
import time
from contextlib import contextmanager
from typing import Iterator

PACKAGE_LOGGER = "lasraster"


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Set up logging for the package.

    Args:
        verbose: If True, set level to DEBUG.
        quiet: If True, only log warnings and errors. Ignored when verbose.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Progress goes to stderr so stdout stays clean for piping
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()
    logger.addHandler(console_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the specified module.

    Args:
        name: Module name (usually __name__).

    Returns:
        Logger instance.
    """
    if name == PACKAGE_LOGGER or name.startswith(f"{PACKAGE_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")


@contextmanager
def log_stage(logger: logging.Logger, stage: str) -> Iterator[None]:
    """Log the start, duration and failure of a processing stage.

    Exceptions are logged with the stage name and re-raised unchanged.
    """
    logger.info(f"{stage}...")
    start = time.perf_counter()
    try:
        yield
    except Exception:
        logger.error(f"{stage} failed after {time.perf_counter() - start:.2f}s")
        raise
    logger.debug(f"{stage} finished in {time.perf_counter() - start:.2f}s")
