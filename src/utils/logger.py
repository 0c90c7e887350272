"""
src/utils/logger.py
Console (Rich) + rotating file logger shared by crawlers and pipeline steps.
"""
import logging
import os
from logging.handlers import RotatingFileHandler

from rich.logging import RichHandler

LOG_DIR = os.getenv("LOG_DIR", "logs")

_loggers: dict[str, logging.Logger] = {}


def get_logger(name: str = "lottomax") -> logging.Logger:
    if name in _loggers:
        return _loggers[name]

    logger = logging.getLogger(name)
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logger.setLevel(getattr(logging, level, logging.INFO))
    logger.propagate = False

    if not logger.handlers:
        console = RichHandler(rich_tracebacks=True, show_path=False)
        console.setLevel(logging.DEBUG)
        logger.addHandler(console)

        os.makedirs(LOG_DIR, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(LOG_DIR, f"{name}.log"),
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
        logger.addHandler(file_handler)

    _loggers[name] = logger
    return logger
