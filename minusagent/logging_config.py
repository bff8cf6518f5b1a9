import logging
from logging import Logger
from logging.handlers import RotatingFileHandler
import os

LOG_FILE = os.getenv("LOG_FILE", "minusagent.log")


def setup_logger(name: str, log_file: str | None = None, level: str = "INFO") -> Logger:
    """
    Set up a logger with a rotating file handler. Set level via LOG_LEVEL env var or parameter.

    Handlers are attached once per logger name, so modules can call this at import time.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        log_level = os.getenv("LOG_LEVEL", level).upper()
        target = log_file or os.getenv("LOG_FILE", LOG_FILE)
        handler = RotatingFileHandler(target, maxBytes=2 * 1024 * 1024, backupCount=2, delay=True)
        formatter = logging.Formatter(
            '%(asctime)s | %(levelname)s | %(name)s | %(message)s', datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(getattr(logging, log_level, logging.INFO))
    return logger


def get_log_level_from_env(env_str: str | None) -> str:
    """Map a deployment name (prod/debug) onto a logging level name."""
    if env_str is None:
        return os.getenv("LOG_LEVEL", "INFO")
    env_str = env_str.strip().lower()
    if env_str in ["prod", "production", "personal"]:
        return "WARNING"
    if env_str in ["debug", "dev", "development"]:
        return "DEBUG"
    return "INFO"
