"""
Logging Configuration
Sets up the 'smiledesign' logger for the package.

The engines and the store only emit records through module loggers; the
embedding application calls `setup_logging` once at startup to decide where
those records go (console, and optionally a session log file).
"""
import logging
import sys
from typing import Optional, Union

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%H:%M:%S'


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    file_level: Union[int, str, None] = None,
) -> logging.Logger:
    """
    Configures the 'smiledesign' logger.

    Args:
        level: Console level, as a number or a name ("DEBUG", "INFO", ...).
        log_file: Optional path of a session log, overwritten on each start.
        file_level: Level for the session log; defaults to `level`. Set it to
            DEBUG to keep the per-landmark edit trail out of the console.

    Returns:
        The configured package logger.
    """
    level = logging.getLevelName(level) if isinstance(level, str) else level
    if not isinstance(level, int):
        raise ValueError(f"Unknown logging level '{level}'.")
    file_level = level if file_level is None else (
        logging.getLevelName(file_level) if isinstance(file_level, str) else file_level
    )

    logger = logging.getLogger("smiledesign")
    # The logger itself passes whatever either handler wants
    logger.setLevel(min(level, file_level) if log_file else level)

    # Re-initialising must not stack handlers
    if logger.hasHandlers():
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(file_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.info(f"Logging initialized (console={logging.getLevelName(level)}).")
    return logger
