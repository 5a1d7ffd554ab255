"""Logging setup for the command line renderer.

Library modules only create module-level loggers with
``logging.getLogger(__name__)``; handlers are attached here, once, by the
entry point.
"""

import logging

PACKAGE_LOGGER = "src.pathtracer"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# -v count -> level
_VERBOSITY_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def level_for_verbosity(verbosity: int) -> int:
    """Map a ``-v`` count to a logging level (WARNING, INFO, DEBUG)."""
    return _VERBOSITY_LEVELS[max(0, min(verbosity, len(_VERBOSITY_LEVELS) - 1))]


def setup_logging(
    name: str = PACKAGE_LOGGER,
    level: int = logging.WARNING,
    log_format: str = DEFAULT_FORMAT,
    log_file: str | None = None,
) -> logging.Logger:
    """Configure the package logger.

    Existing handlers are replaced, so calling this twice does not duplicate
    output.

    Args:
        name: Logger to configure (default: the package root logger).
        level: Logging level.
        log_format: Format string for every handler.
        log_file: Optional file that receives a copy of the log.

    Returns:
        The configured logger.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.hasHandlers():
        logger.handlers.clear()

    # StreamHandler writes to stderr; stdout stays clean
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    formatter = logging.Formatter(log_format)
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False

    return logger
