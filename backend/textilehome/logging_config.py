"""
Logging setup for the storefront backend.

All module loggers live under the ``textilehome`` namespace
(``textilehome.security``, ``textilehome.http`` ...) so one handler here
covers the whole app.
"""
import logging
import sys

LOGGER_NAME = "textilehome"


def setup_logging(level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())

    # idempotent: create_app() may run more than once per process (tests)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(handler)

    logger.propagate = False
    return logger
