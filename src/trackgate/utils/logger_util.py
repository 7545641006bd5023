import logging
import os


def _level_from_env(default: int = logging.INFO) -> int:
    raw = os.getenv("TRACKGATE_LOG_LEVEL", "").strip().upper()
    if not raw:
        return default
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else default


def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """Get a named logger with standard formatting.

    Example:
        logger = get_logger(__name__)
        logger.info("Rejected payload: %s", errors)

    The level defaults to ``TRACKGATE_LOG_LEVEL`` (INFO when unset).
    """
    logger = logging.getLogger(name)
    resolved = level if level is not None else _level_from_env()

    # avoid adding duplicate handlers if called repeatedly (common in tests)
    if logger.handlers:
        logger.setLevel(resolved)
        return logger

    handler = logging.StreamHandler()
    formatter = logging.Formatter(
        "%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(resolved)
    # stop passing records to the root logger (avoid duplicated messages)
    logger.propagate = False
    return logger
