"""
k8soci Logging Module

Logging for credential resolution. Log records go to a daily rotated file in a
platform log directory, warnings and errors also go to stderr, and values under
secret-looking keys are masked before they are written.

Key Features:
- Single log file with daily rotation
- Cross-platform log directory detection
- API call logging for token exchanges
- Authentication event logging
- Automatic sanitization of sensitive data
"""

from .logger import (
    get_logger,
    setup_logging,
    log_api_call,
    log_authentication_event,
)
from .config import LogConfig, LogLevel
from .utils import sanitize_data, get_log_directory

__all__ = [
    "get_logger",
    "setup_logging",
    "log_api_call",
    "log_authentication_event",
    "LogLevel",
    "LogConfig",
    "sanitize_data",
    "get_log_directory",
]
