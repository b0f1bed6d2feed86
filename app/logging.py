"""
Logging configuration.
Uvicorn and application loggers share one level; upstream failures use logger.exception (app/services/completion.py).
"""
import logging
import sys

# Client libraries that log every HTTP request at INFO
_CHATTY_LOGGERS = ("httpx", "httpcore", "openai")


def setup_logging(
    level: int | str = logging.INFO,
    format_string: str | None = None,
) -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.INFO
    if format_string is None:
        format_string = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    logging.basicConfig(
        level=level,
        format=format_string,
        stream=sys.stdout,
        force=True,
    )
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)
    for name in ("nirogya", "app"):
        logging.getLogger(name).setLevel(level)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
