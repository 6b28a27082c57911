# prpromptbuilder/services/logging.py
import sys
from loguru import logger

from ..config.paths import get_user_log_dir


def setup_logging(level="INFO", verbose=False, log_to_file=True):
    """Configures logging using Loguru."""
    log_level = "DEBUG" if verbose else level

    # Remove default handler
    logger.remove()

    # stderr can be missing in windowed/frozen builds
    if sys.stderr:
        fmt_console = "<level>{level: <8}</level> | <cyan>{name}:{function}:{line}</cyan> - <level>{message}</level>"
        logger.add(
            sys.stderr,
            level=log_level,
            format=fmt_console,
            colorize=True,
        )
        logger.debug("Console logger added.")

    if not log_to_file:
        return

    fmt_file = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {process} | {thread} | {name}:{function}:{line} - {message}"
    try:
        log_file_str = str(get_user_log_dir() / "prpromptbuilder_{time:YYYY-MM-DD}.log")
        logger.add(
            log_file_str, level="DEBUG", format=fmt_file, rotation="1 day",
            retention="7 days", compression="zip", enqueue=False, encoding="utf-8"
        )
        logger.info(f"File logging initialized. Level: {log_level}. Log file: {log_file_str}")
    except OSError as e:
        logger.error(f"Could not configure file logging: {e}")
        logger.warning("File logging disabled.")
