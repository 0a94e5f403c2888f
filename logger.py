# logger.py
import logging
from logging.handlers import RotatingFileHandler
import os
import sys

from config import config

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def build_logger(name: str, log_dir: str, level: str = "INFO") -> logging.Logger:
    """Return a logger writing to a rotating file under log_dir and to stdout."""
    os.makedirs(log_dir, exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT)

    # 1MB per file, 5 backups
    file_handler = RotatingFileHandler(
        os.path.join(log_dir, "chat_sidebar.log"), maxBytes=1_000_000, backupCount=5
    )
    file_handler.setFormatter(formatter)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)

    built = logging.getLogger(name)
    built.setLevel(level.upper())
    # Avoid duplicate handlers if configured twice
    built.handlers.clear()
    built.addHandler(file_handler)
    built.addHandler(stream_handler)
    built.propagate = False
    return built


logger = build_logger("ChatSidebar", config.LOG_DIR, config.LOG_LEVEL)
