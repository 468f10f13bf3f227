"""
Logger factories shared by services and Lambda handlers.

Services use plain stdlib loggers; the Lambda entry point uses the
aws_lambda_powertools Logger so records carry the Lambda context.
"""

import logging
import os

from aws_lambda_powertools import Logger


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_logger(name: str) -> logging.Logger:
    """stdlib logger with the level taken from LOG_LEVEL."""
    logger = logging.getLogger(name)
    logger.setLevel(get_log_level())
    return logger


def get_powertools_logger(child: bool = False) -> Logger:
    return Logger(
        service=os.getenv("AWS_LAMBDA_FUNCTION_NAME", "nano-image-functions"),
        level=get_log_level(),
        child=child,
    )
