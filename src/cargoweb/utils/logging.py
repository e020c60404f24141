import logging
from pathlib import Path
from datetime import datetime
from typing import Optional


# logging.py
def setup_logger(log_dir: Optional[Path] = None) -> logging.Logger:
    """Set up logging configuration."""
    logger = logging.getLogger("cargoweb")
    logger.setLevel(logging.DEBUG)

    if log_dir is not None and not _has_file_handler(logger):
        log_dir.mkdir(parents=True, exist_ok=True)

        # Debug file handler
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        debug_handler = logging.FileHandler(
            log_dir / f"debug_{timestamp}.log"
        )
        debug_handler.setLevel(logging.DEBUG)
        debug_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        logger.addHandler(debug_handler)

    if _has_console_handler(logger):
        return logger

    # Info console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(
        '%(levelname)s: %(message)s'
    ))
    logger.addHandler(console_handler)

    return logger


def set_verbose(logger: logging.Logger, verbose: bool) -> None:
    """Let debug records through to the console."""
    level = logging.DEBUG if verbose else logging.INFO
    for handler in logger.handlers:
        if not isinstance(handler, logging.FileHandler):
            handler.setLevel(level)


def _has_file_handler(logger: logging.Logger) -> bool:
    return any(isinstance(h, logging.FileHandler) for h in logger.handlers)


def _has_console_handler(logger: logging.Logger) -> bool:
    return any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in logger.handlers
    )
