"""
Services Module - Infrastructure services for the access-control service.

- Logging and observability
"""

from .logging_config import AccessLogger, configure_logging, get_logger

__all__ = [
    "AccessLogger",
    "configure_logging",
    "get_logger",
]
