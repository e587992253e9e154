"""
Configuration Validator
Validates environment and ConfigMap values
"""

import logging

logger = logging.getLogger(__name__)

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
LOG_FORMATS = ('json', 'text')


class ConfigValidator:
    """Validate configuration values"""

    @staticmethod
    def validate_check_interval(interval: str) -> int:
        """Validate check interval"""
        try:
            value = int(interval)
        except ValueError as e:
            raise ValueError(f"Invalid CHECK_INTERVAL: {interval}. Must be an integer") from e
        if value < 1:
            raise ValueError(f"CHECK_INTERVAL must be at least 1 second, got {value}")
        if value > 3600:
            raise ValueError(f"CHECK_INTERVAL must be at most 3600 seconds (1 hour), got {value}")
        return value

    @staticmethod
    def validate_port(port: str, name: str = "PORT") -> int:
        """Validate port number"""
        try:
            val = int(port)
        except ValueError as e:
            raise ValueError(f"Invalid {name}: {port}. Must be an integer") from e
        if val < 1 or val > 65535:
            raise ValueError(f"{name} must be between 1 and 65535, got {val}")
        return val

    @staticmethod
    def validate_log_level(level: str) -> str:
        value = level.strip().upper()
        if value not in LOG_LEVELS:
            raise ValueError(f"Invalid LOG_LEVEL: {level}. Must be one of {', '.join(LOG_LEVELS)}")
        return value

    @staticmethod
    def validate_log_format(log_format: str) -> str:
        value = log_format.strip().lower()
        if value not in LOG_FORMATS:
            raise ValueError(f"Invalid LOG_FORMAT: {log_format}. Must be 'json' or 'text'")
        return value

    @staticmethod
    def validate_required(value: str, name: str) -> str:
        """Reject empty strings"""
        if not value or not value.strip():
            raise ValueError(f"{name} is required")
        return value.strip()

    @staticmethod
    def parse_bool(value: str) -> bool:
        return str(value).strip().lower() == "true"
