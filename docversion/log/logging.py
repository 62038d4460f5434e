"""
Loguru logger configuration shared by the whole package.

Import the configured logger with ``from docversion.log.logging import logger``.
Structured fields are passed as keyword arguments and end up in ``record["extra"]``.
"""
import logging.handlers
import sys

from loguru import logger

from docversion.core.config import settings

TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[app_name]}</cyan> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def configure_logging(config: dict | None = None) -> None:
    """
    (Re)configure the global loguru logger.

    Args:
        config: Logging configuration, defaults to ``settings.logging_config``.
    """
    config = config or settings.logging_config

    logger.remove()
    logger.configure(extra={"app_name": config["app_name"]})

    if config["json_logs"]:
        logger.add(sys.stderr, level=config["log_level"], serialize=True)
    else:
        logger.add(sys.stderr, level=config["log_level"], format=TEXT_FORMAT)

    if config.get("enable_logstash") and config.get("syslog_host"):
        handler = logging.handlers.SysLogHandler(
            address=(config["syslog_host"], config["syslog_port"])
        )
        logger.add(handler, level=config["log_level"], serialize=True)


configure_logging()

__all__ = ["logger", "configure_logging"]
