"""Logging setup for wizard runs."""

import logging
import sys

logger = logging.getLogger(__name__)


def configure_logging(log_level: str = "INFO") -> None:
    """Send flowwizard log records to stdout.

    Only the 'flowwizard' logger is configured, so host applications keep
    their own root logging setup. Calling it again is a no-op.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    if hasattr(configure_logging, "has_run"):
        return

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))

    package_logger = logging.getLogger("flowwizard")
    package_logger.setLevel(numeric_level)
    package_logger.addHandler(handler)

    configure_logging.has_run = True
    logger.info(f"Logging configured at level: {log_level}")
