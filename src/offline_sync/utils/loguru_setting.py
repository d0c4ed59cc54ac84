import logging
import sys

from loguru import logger
from offline_sync.global_const.global_const import env, settings


class InterceptHandler(logging.Handler):
    def emit(self, record):
        # Retrieve context where the logging call occurred, this happens to be in the 6th frame upward
        logger_opt = logger.opt(depth=6, exception=record.exc_info)
        logger_opt.log(record.levelno, record.getMessage())


def intercept_apscheduler_logging(level: int = logging.INFO) -> None:
    """Route the apscheduler stdlib loggers through loguru."""
    aps_logger = logging.getLogger("apscheduler")
    aps_logger.handlers = [InterceptHandler()]
    aps_logger.setLevel(level)
    aps_logger.propagate = False


def loguru_setting(production=env == "production"):
    folder_ = settings.get("logging.folder", "./Logs/")
    prefix_ = settings.get("logging.prefix", "offline_sync-")
    rotation_ = "00:00"
    retention_ = "30 days"
    encoding_ = "utf-8"
    backtrace_ = True
    diagnose_ = not production

    # process and thread ids help when jobs run on the scheduler's worker threads
    format_ = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> "
        "| <magenta>{process}</magenta>:<yellow>{thread}</yellow> "
        "| <cyan>{name}</cyan>:<cyan>{function}</cyan>:<yellow>{line}</yellow> - <level>{message}</level>"
    )

    log_level = "INFO" if production else "DEBUG"

    logger.remove()

    # Tiered files: each file holds its level and everything above it
    for level in (log_level, "WARNING", "ERROR"):
        logger.add(
            folder_ + prefix_ + level.lower() + ".log",
            level=level,
            backtrace=backtrace_,
            diagnose=diagnose_,
            format=format_,
            colorize=False,
            rotation=rotation_,
            retention=retention_,
            encoding=encoding_,
            enqueue=True,
        )

    logger.add(
        sys.stderr,
        level=log_level,
        backtrace=backtrace_,
        diagnose=diagnose_,
        format=format_,
        colorize=True,
    )

    intercept_apscheduler_logging()
