"""Logging configuration helpers."""

import logging

PACKAGE_LOGGER = "photo_report"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s: %(name)s: %(message)s"

_HANDLER_NAME = "photo_report.stream"

# Pillow plugins log every decoded chunk at debug level
_NOISY_LOGGERS = ("PIL",)


def configure_logging(
    level: str = "INFO", *, fmt: str = DEFAULT_FORMAT
) -> logging.Logger:
    """Route package logs to one stream handler and return the package logger.

    Calling this again only adjusts the level. Third-party decoders stay at
    WARNING even when the application runs at DEBUG.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level.upper())
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if not any(handler.get_name() == _HANDLER_NAME for handler in logger.handlers):
        handler = logging.StreamHandler()
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(fmt))
        logger.addHandler(handler)
    logger.propagate = False
    return logger
