"""Models package - Schedule and channel data structures"""

from .schedule import (
    Streamer,
    Category,
    StreamEvent,
    ScheduleDocument,
    ResolvedStream,
    parse_color,
)
from .channel_state import RecordKind, ChannelRecord, ChannelState

__all__ = [
    'Streamer',
    'Category',
    'StreamEvent',
    'ScheduleDocument',
    'ResolvedStream',
    'parse_color',
    'RecordKind',
    'ChannelRecord',
    'ChannelState',
]
