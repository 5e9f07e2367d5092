"""
Logging setup for the reader.

Modules log through ``logging.getLogger(__name__)``; this wires the
``dbmreader`` logger to a diagnostic file and a rich console handler.
"""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

THEME = Theme({
    "logging.level.info": "cyan",
    "logging.level.warning": "yellow",
    "logging.level.error": "bold red",
})

console = Console(theme=THEME)


def setup_logging(
    log_file_path: Optional[Path] = None,
    level: str = "INFO",
    log_to_file: bool = True,
    log_to_console: bool = True
) -> logging.Logger:
    """
    Initialize the ``dbmreader`` logger.

    Args:
        log_file_path: Path to the diagnostic log file
        level: Logging level for the console (DEBUG, INFO, WARNING, ERROR)
        log_to_file: Whether to write logs to file
        log_to_console: Whether to write logs to the console

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger("dbmreader")
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    if log_to_file and log_file_path is not None:
        log_file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)  # File gets everything
        file_handler.setFormatter(logging.Formatter(
            "[%(asctime)s] %(levelname)s %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        logger.addHandler(file_handler)

    if log_to_console:
        console_handler = RichHandler(console=console, show_path=False)
        console_handler.setLevel(getattr(logging, level.upper()))
        logger.addHandler(console_handler)

    return logger
