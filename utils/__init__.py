"""Utils package - Utility functions and helpers"""

from .error_handling import (
    log_error,
    is_retryable_error,
    ScheduleSyncError,
    FetchError,
    ParseError,
    MutationError,
    ConfigError,
)
from .stream_keys import (
    identity_key,
    fingerprint,
    desired_key,
    serialize_marker,
    parse_marker,
)
from .timestamp import pad_date, normalize, get_zone, to_discord_timestamp
from .formatting import create_stream_embed, create_header_embed

__all__ = [
    'log_error',
    'is_retryable_error',
    'ScheduleSyncError',
    'FetchError',
    'ParseError',
    'MutationError',
    'ConfigError',
    'identity_key',
    'fingerprint',
    'desired_key',
    'serialize_marker',
    'parse_marker',
    'pad_date',
    'get_zone',
    'normalize',
    'to_discord_timestamp',
    'create_stream_embed',
    'create_header_embed',
]
