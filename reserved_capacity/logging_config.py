"""
Structured Logging Configuration
JSON logging for log aggregation, plain text for local runs
"""

import logging
import sys
from typing import Optional

from pythonjsonlogger import jsonlogger


def setup_structured_logging(
    log_level: str = "INFO",
    json_format: bool = True,
    extra_fields: Optional[dict] = None
) -> logging.Logger:
    """
    Setup root logger on stdout

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_format: Emit JSON records instead of plain text
        extra_fields: Static fields added to every JSON record

    Returns:
        Configured root logger
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    if json_format:
        formatter = jsonlogger.JsonFormatter(
            '%(asctime)s %(levelname)s %(name)s %(message)s',
            static_fields=extra_fields or {},
            timestamp=True
        )
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    return root_logger


def get_logger(name: str, extra_context: Optional[dict] = None):
    """
    Get a logger, wrapped in an adapter when extra context is given

    Args:
        name: Logger name (usually __name__)
        extra_context: Fields attached to every record from this logger
    """
    logger = logging.getLogger(name)
    if extra_context:
        return ContextAdapter(logger, extra_context)
    return logger


class ContextAdapter(logging.LoggerAdapter):
    """Merge adapter context into each record's extra fields"""

    def process(self, msg, kwargs):
        kwargs['extra'] = {**self.extra, **kwargs.get('extra', {})}
        return msg, kwargs
