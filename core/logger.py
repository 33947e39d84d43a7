import logging
import sys
from pathlib import Path
from typing import Optional

from config.settings import SYSTEM_CONFIG, LOG_DIR

def setup_logger(name: str = "", log_file: Optional[str] = "advisor.log", log_dir: Path = LOG_DIR,
                 level: Optional[str] = None) -> logging.Logger:
    """
    Configure and return a logger instance.
    The root logger ("") is configured by default so every dotted module
    logger (e.g. "core.allocation.engine") inherits the handlers.
    """
    logger = logging.getLogger(name)

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    level_name = (level or SYSTEM_CONFIG["LOG_LEVEL"]).upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    # Format
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Console Handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File Handler
    if log_file:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / log_file, encoding='utf-8')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
