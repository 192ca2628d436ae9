import logging
import sys


class ConsoleHandler(logging.StreamHandler):
    """Stream handler installed by setup_console_logging."""


def setup_console_logging(stream=None, level=logging.INFO):
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger = logging.getLogger()
    logger.setLevel(level)
    for handler in logger.handlers[:]:
        if isinstance(handler, ConsoleHandler):
            logger.removeHandler(handler)
    handler = ConsoleHandler(stream or sys.stderr)
    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return handler


def setup_from_settings(settings, stream=None):
    """Install the console handler at the settings' `log_level`."""
    return setup_console_logging(stream, level=settings.get("log_level", "INFO"))
