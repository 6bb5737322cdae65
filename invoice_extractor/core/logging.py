"""
Loguru setup shared by the API, the CLI and the folder watcher.

Standard-library loggers (uvicorn, httpx) are routed into loguru so every
line ends up in the same sink with the same format.
"""

import logging
import sys

from loguru import logger

from .config import settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
    "<level>{message}</level> {extra}"
)


class InterceptHandler(logging.Handler):
    """Forward stdlib logging records to loguru"""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk back to the frame that issued the logging call
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str | None = None, json_logs: bool | None = None):
    """
    Configure loguru and return the shared logger.

    Args:
        level: Minimum level (defaults to LOG_LEVEL)
        json_logs: Emit JSON lines instead of the coloured format (defaults to LOG_JSON)
    """
    level = (level or settings.log_level).upper()
    json_logs = settings.log_json if json_logs is None else json_logs

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=LOG_FORMAT,
        serialize=json_logs,
        backtrace=False,
        diagnose=False,
    )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "httpx"):
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False

    logger.bind(app=settings.app_name, env=settings.app_env).debug("Logging configured", level=level)
    return logger
