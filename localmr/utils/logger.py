import logging
from typing import Optional, Union

ROOT_LOGGER_NAME = "localmr"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Retrieve a configured logger for the specified module.

    If no name is provided, the package logger 'localmr' is returned.
    Module loggers (``get_logger(__name__)``) are children of the package
    logger, which carries the single StreamHandler and the standard format:
    timestamp, level, logger name and message.

    Args:
        name (Optional[str]): Name of the logger (usually the module name).

    Returns:
        logging.Logger: Configured logger instance.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '[%(asctime)s] %(levelname)s %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)
        root.setLevel(logging.INFO)
    return logging.getLogger(name or ROOT_LOGGER_NAME)


def setup_logger(level: Union[str, int] = "info") -> logging.Logger:
    """
    Initialize the package logger with the requested level.

    Typically called once by the command line entry point.

    Args:
        level: Level name ("debug", "info", ...) or numeric logging level.

    Returns:
        logging.Logger: Package logger.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = get_logger()
    logger.setLevel(level)
    logger.debug("LocalMR logger initialized")
    return logger
