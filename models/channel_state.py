"""
Channel state models - a snapshot of what the schedule channel shows right now
"""
import datetime
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional


class RecordKind(Enum):
    HEADER = "header"
    STREAM = "stream"
    FOREIGN = "foreign"


@dataclass
class ChannelRecord:
    """One channel message, classified"""
    message: Any
    created_at: datetime.datetime
    kind: RecordKind
    key: Optional[str] = None


@dataclass
class ChannelState:
    """Observed channel contents, rebuilt from history on every pass"""
    header: Optional[ChannelRecord] = None
    streams: List[ChannelRecord] = field(default_factory=list)  # oldest first
    foreign: List[ChannelRecord] = field(default_factory=list)

    @property
    def keys(self) -> List[str]:
        return [record.key for record in self.streams]
