"""Managers package - Schedule fetching, channel access and sync"""

from .schedule_manager import (
    ScheduleFetcher,
    resolve_streams,
    get_upcoming_streams,
    preview_schedule,
)
from .channel_manager import (
    classify_message,
    read_channel_state,
    clear_channel,
    post_schedule,
)
from .sync_manager import (
    Decision,
    SyncResult,
    ScheduleSync,
    reconcile,
)

__all__ = [
    'ScheduleFetcher',
    'resolve_streams',
    'get_upcoming_streams',
    'preview_schedule',
    'classify_message',
    'read_channel_state',
    'clear_channel',
    'post_schedule',
    'Decision',
    'SyncResult',
    'ScheduleSync',
    'reconcile',
]
