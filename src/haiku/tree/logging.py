import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "haiku.tree"

_NOISY_LOGGERS = ("lancedb", "pylance", "urllib3", "asyncio")


def get_logger() -> logging.Logger:
    """Return the package logger, attaching a rich handler on first use."""
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def configure_cli_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for CLI runs.

    Only the package logger prints; the root logger and chatty third-party
    loggers are raised to ERROR and detached.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.ERROR)

    for name in _NOISY_LOGGERS:
        noisy = logging.getLogger(name)
        noisy.setLevel(logging.ERROR)
        noisy.propagate = False

    logger = get_logger()
    logger.setLevel(level)
    return logger
