import logging
import sys


logger = logging.getLogger("gitsemver")

_handler = None


def configure_logging(debug: bool):
    """
    Configures the logging system based on the debug flag.

    Log lines go to stderr; stdout carries only the computed version.
    """
    global _handler

    if _handler is not None:
        logger.removeHandler(_handler)

    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(logging.Formatter("%(message)s"))

    log_level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(log_level)
    logger.addHandler(_handler)
