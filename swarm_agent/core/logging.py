"""Logging configuration for the runtime's audit trail."""

import logging
import sys

ROOT_LOGGER = "swarm"


def setup_logging(debug: bool = False) -> logging.Logger:
    """Configure structured logging for the runtime.

    Every tool mutation, approval decision and peer message is logged.
    """
    level = logging.DEBUG if debug else logging.INFO

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)

    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(level)
    # Repeated setup (tests, clones started in-process) must not stack handlers
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific module."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
