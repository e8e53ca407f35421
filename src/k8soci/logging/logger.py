"""
Main logging module for k8soci.

This module provides the primary logging interface and logger setup
with daily rotation.
"""

import logging
import logging.handlers
import sys
from typing import Optional, Dict, Any

from .config import LogConfig, LogLevel, get_log_file_path
from .formatters import K8sOciFormatter, APICallFormatter
from .utils import cleanup_old_logs


# Global logger registry
_loggers: Dict[str, logging.Logger] = {}
_logging_configured = False
_log_config: Optional[LogConfig] = None


def _configured_level() -> Optional[LogLevel]:
    """Read the log level stored in settings.json, if any"""
    from k8soci.utils.config_store import ConfigStore

    user_level = ConfigStore().get_log_level()
    if user_level and user_level in [lev.value for lev in LogLevel]:
        return LogLevel(user_level)
    return None


def _rotating_handler(log_file_path, config: LogConfig) -> logging.Handler:
    handler = logging.handlers.TimedRotatingFileHandler(
        filename=log_file_path,
        when='midnight',
        interval=1,
        backupCount=config.log_retention_days,
        encoding='utf-8',
        utc=False
    )
    # Rotated files get a YYYY-MM-DD suffix
    handler.suffix = "%Y-%m-%d"
    return handler


def setup_logging(config: Optional[LogConfig] = None, force_reconfigure: bool = False) -> None:
    """
    Set up the k8soci logging system.

    Args:
        config: LogConfig instance, uses default if None
        force_reconfigure: Force reconfiguration even if already set up
    """
    global _logging_configured, _log_config

    if _logging_configured and not force_reconfigure:
        return

    if config is None:
        config = LogConfig()
        try:
            user_level = _configured_level()
            if user_level:
                config.default_level = user_level
        except Exception:
            # Unreadable settings fall back to the default level
            pass

    _log_config = config
    log_file_path = get_log_file_path(config)

    root_logger = logging.getLogger("k8soci")
    root_logger.setLevel(getattr(logging, config.default_level.value))
    root_logger.handlers.clear()

    file_handler = _rotating_handler(log_file_path, config)
    file_handler.setLevel(getattr(logging, config.default_level.value))
    file_handler.setFormatter(K8sOciFormatter(
        include_timestamps=config.include_timestamps,
        include_thread_info=config.include_thread_info,
        sanitize_sensitive=config.sanitize_sensitive_data,
        sensitive_keys=config.sensitive_keys
    ))
    root_logger.addHandler(file_handler)

    if config.console_level != LogLevel.ERROR or config.default_level == LogLevel.DEBUG:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(getattr(logging, config.console_level.value))
        console_handler.setFormatter(K8sOciFormatter(
            include_timestamps=False,
            sanitize_sensitive=config.sanitize_sensitive_data,
            sensitive_keys=config.sensitive_keys
        ))
        root_logger.addHandler(console_handler)

    # API calls get their own formatter and never propagate to the root handlers
    api_logger = logging.getLogger("k8soci.api")
    api_logger.setLevel(logging.DEBUG)
    api_logger.handlers.clear()
    if config.log_api_calls:
        api_handler = _rotating_handler(log_file_path, config)
        api_handler.setLevel(logging.DEBUG)
        api_handler.setFormatter(APICallFormatter(
            sanitize_sensitive=config.sanitize_sensitive_data,
            sensitive_keys=config.sensitive_keys
        ))
        api_logger.addHandler(api_handler)
    api_logger.propagate = False

    try:
        cleanup_old_logs(log_file_path.parent, config.log_retention_days)
    except OSError:
        pass

    _logging_configured = True

    setup_logger = get_logger("k8soci.setup")
    setup_logger.debug(f"Logging initialized - File: {log_file_path}, "
                       f"Level: {config.default_level.value}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the specified name.

    Args:
        name: Logger name (e.g., 'k8soci.oci.registry')

    Returns:
        logging.Logger: Logger instance
    """
    if not _logging_configured:
        setup_logging()

    if name not in _loggers:
        _loggers[name] = logging.getLogger(name)

    return _loggers[name]


def log_api_call(
    method: str,
    url: str,
    status_code: Optional[int] = None,
    duration: Optional[float] = None,
    error: Optional[str] = None,
    logger_name: str = "k8soci.api"
) -> None:
    """
    Log an API call with structured information.

    Args:
        method: HTTP method
        url: Request URL
        status_code: Response status code
        duration: Request duration in seconds
        error: Error message if request failed
        logger_name: Logger name to use
    """
    logger = get_logger(logger_name)

    extra = {
        "api_method": method,
        "api_url": url,
        "api_status": status_code,
        "api_duration": duration or 0,
    }
    if error:
        extra["api_error"] = error

    if error or (status_code and status_code >= 500):
        logger.error("API call failed", extra=extra)
    elif status_code and 400 <= status_code < 500:
        logger.warning("API call client error", extra=extra)
    else:
        logger.debug("API call completed", extra=extra)


def log_authentication_event(
    auth_type: str,
    success: bool,
    details: Optional[Dict[str, Any]] = None,
    logger_name: str = "k8soci.auth"
) -> None:
    """
    Log authentication events with appropriate levels.

    Args:
        auth_type: Type of authentication (token, basic, github-app, anonymous)
        success: Whether authentication was successful
        details: Additional auth details (will be sanitized)
        logger_name: Logger name to use
    """
    logger = get_logger(logger_name)
    extra = {
        "auth_type": auth_type,
        "auth_success": success
    }

    if details:
        from .utils import sanitize_data
        from k8soci.constants import SENSITIVE_KEYS
        extra["auth_details"] = sanitize_data(details, SENSITIVE_KEYS)

    if success:
        logger.info(f"Authentication resolved: {auth_type}", extra=extra)
    else:
        logger.error(f"Authentication failed: {auth_type}", extra=extra)
