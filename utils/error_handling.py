"""
Error handling and logging module.

Provides the schedule sync error hierarchy and centralized error logging
with file persistence.
"""

import os
import logging
from logging.handlers import RotatingFileHandler
from typing import Optional
from config import LOGS_DIR

# ============================================================================
# ERROR TYPES
# ============================================================================

class ScheduleSyncError(Exception):
    """Base exception for all schedule sync errors."""

    pass


class FetchError(ScheduleSyncError):
    """Schedule document could not be retrieved or is not a schedule.

    The whole refresh cycle aborts and the channel is left untouched.
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ParseError(ScheduleSyncError):
    """A single stream event is malformed. Only that event is dropped."""

    pass


class ConfigError(ScheduleSyncError):
    """A setting (such as the reference timezone) is unusable.

    Fatal at startup. Inside a refresh cycle it aborts the cycle and the
    channel is left untouched.
    """

    pass


class MutationError(ScheduleSyncError):
    """Posting to the channel failed mid-rebuild.

    The trailing header is then missing, which forces a rebuild next cycle.
    """

    def __init__(self, message: str, posted: int = 0):
        super().__init__(message)
        self.posted = posted


# ============================================================================
# ERROR LOGGING SYSTEM
# ============================================================================

# Setup error logger with rotation (5MB per file, keep 5 backup files)
error_logger = logging.getLogger('schedule_bot_errors')
error_logger.setLevel(logging.ERROR)

# Rotating file handler - creates new file when size exceeds 5MB
error_log_file = os.path.join(LOGS_DIR, "errors.log")
if not error_logger.handlers:
    error_handler = RotatingFileHandler(
        error_log_file,
        maxBytes=5*1024*1024,  # 5MB per file
        backupCount=5,          # Keep 5 backup files
        encoding='utf-8',
        delay=True
    )
    error_handler.setLevel(logging.ERROR)

    # Format: timestamp | level | location | message
    error_formatter = logging.Formatter(
        '%(asctime)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    error_handler.setFormatter(error_formatter)
    error_logger.addHandler(error_handler)


def log_error(error: Exception, context: str = None, extra_info: dict = None):
    """Log error to local file for debugging

    Args:
        error: The exception that occurred
        context: Description of what was happening when error occurred
        extra_info: Additional key-value pairs to log

    Example:
        try:
            await clear_channel(channel)
        except Exception as e:
            log_error(e, "Clearing schedule channel", {"channel_id": channel.id})
    """
    try:
        error_msg = f"{type(error).__name__}: {str(error)}"
        if context:
            error_msg = f"[{context}] {error_msg}"
        if extra_info:
            info_str = " | ".join(f"{k}={v}" for k, v in extra_info.items())
            error_msg = f"{error_msg} | {info_str}"

        error_logger.error(error_msg, exc_info=error)
        print(f"📝 {error_msg}")
    except Exception as log_e:
        print(f"⚠️ Failed to log error: {log_e}")


def is_retryable_error(e: Exception) -> bool:
    """Check if an error is network-related and likely to clear up by itself

    Args:
        e: The exception to check

    Returns:
        True if error is retryable, False otherwise
    """
    status = getattr(e, "status", None)
    if isinstance(status, int) and (status == 429 or status >= 500):
        return True

    error_str = str(e).lower()
    retryable_keywords = [
        "remotedisconnected", "connection aborted", "connection reset",
        "service unavailable", "429", "failed to resolve", "name resolution",
        "timeout", "timed out", "cannot connect",
        # Server errors (typically transient)
        "500", "502", "503", "504",
        "server error", "bad gateway", "gateway timeout",
        "internal server error", "temporarily unavailable",
    ]
    return any(keyword in error_str for keyword in retryable_keywords)
