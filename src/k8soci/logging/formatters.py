"""
Custom formatters for k8soci logging.
"""

import logging
from datetime import datetime
from .utils import sanitize_data
from k8soci.constants import SENSITIVE_KEYS


class K8sOciFormatter(logging.Formatter):
    """
    Default formatter for k8soci log entries.

    Dict and list messages or arguments are sanitized before formatting,
    so decoded auth entries can be logged without leaking passwords.
    """

    def __init__(
        self,
        include_timestamps: bool = True,
        include_thread_info: bool = False,
        sanitize_sensitive: bool = True,
        sensitive_keys: tuple = None,
    ):
        self.include_timestamps = include_timestamps
        self.include_thread_info = include_thread_info
        self.sanitize_sensitive = sanitize_sensitive
        self.sensitive_keys = sensitive_keys or SENSITIVE_KEYS
        fmt_parts = []
        if include_timestamps:
            fmt_parts.append("%(asctime)s")
        fmt_parts.extend(["%(levelname)s", "[%(name)s]", "%(message)s"])
        if include_thread_info:
            fmt_parts.insert(-1, "[Thread:%(thread)d]")
        super().__init__(fmt=" ".join(fmt_parts), datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        if self.sanitize_sensitive:
            if isinstance(record.msg, (dict, list)):
                record.msg = sanitize_data(record.msg, self.sensitive_keys)
            elif isinstance(record.args, dict):
                # LogRecord unwraps a single mapping argument
                record.args = sanitize_data(record.args, self.sensitive_keys)
            elif isinstance(record.args, (tuple, list)):
                record.args = tuple(
                    sanitize_data(arg, self.sensitive_keys)
                    if isinstance(arg, (dict, list))
                    else arg
                    for arg in record.args
                )

        return super().format(record)


class APICallFormatter(logging.Formatter):
    """
    Formatter for records emitted by log_api_call.

    Produces one line per call with method, sanitized URL, status and timing,
    plus an indented error line when the call failed.
    """

    def __init__(self, sanitize_sensitive: bool = True, sensitive_keys: tuple = None):
        self.sanitize_sensitive = sanitize_sensitive
        self.sensitive_keys = sensitive_keys or SENSITIVE_KEYS
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        method = getattr(record, "api_method", "UNKNOWN")
        url = getattr(record, "api_url", "")
        status = getattr(record, "api_status", None) or "---"
        duration = round(getattr(record, "api_duration", 0) * 1000, 2)

        if self.sanitize_sensitive:
            url = sanitize_data(url, self.sensitive_keys)

        # Example: 2026-02-02 17:27:34 DEBUG [k8soci.api] POST https://... -> 201 (120.0ms)
        lines = [
            f"{timestamp} {record.levelname} [{record.name}] "
            f"{method} {url} -> {status} ({duration}ms)"
        ]

        api_error = getattr(record, "api_error", None)
        if api_error:
            lines.append(f"    Error: {sanitize_data(api_error, self.sensitive_keys)}")

        return "\n".join(lines)
