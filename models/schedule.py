"""
Schedule data models - the remote schedule document and resolved streams
"""
import datetime
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from config import DEFAULT_CATEGORY_COLOR
from utils.error_handling import ParseError, log_error
from utils.stream_keys import identity_key, fingerprint, KEY_DELIMITER
from utils.timestamp import normalize

FALLBACK_CATEGORY = "other"


def parse_color(value) -> int:
    """Parse a category colour: int, "#RRGGBB" or "0xRRGGBB" """
    if isinstance(value, bool):
        return DEFAULT_CATEGORY_COLOR
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text.startswith("#"):
            text = text[1:]
        elif text.startswith("0x"):
            text = text[2:]
        try:
            return int(text, 16)
        except ValueError:
            pass
    return DEFAULT_CATEGORY_COLOR


@dataclass
class Streamer:
    """Streamer profile shown on every stream message"""
    display_name: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, data: Optional[dict]):
        """Build a streamer from raw JSON, an absent entry meaning empty

        Raises:
            ParseError: If the streamer entry is present but not an object
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ParseError(f"Schedule document 'streamer' is not an object: {data!r}")
        return cls(
            display_name=str(data.get("displayName") or ""),
            description=str(data.get("description") or ""),
        )


@dataclass
class Category:
    """Stream category - embed colour plus whatever metadata the schedule carries"""
    category_id: str
    color: int = DEFAULT_CATEGORY_COLOR
    metadata: Dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, category_id: str, data: Optional[dict]):
        data = dict(data or {})
        color = parse_color(data.pop("color", None))
        return cls(category_id=category_id, color=color, metadata=data)


@dataclass
class StreamEvent:
    """One entry of the schedule's streams list, as published"""
    date: str
    start_time: str
    title: str = ""
    description: Optional[str] = None
    image: Optional[str] = None
    category: str = FALLBACK_CATEGORY

    @classmethod
    def from_dict(cls, data: dict, known_categories=None):
        """Build an event from raw JSON

        Raises:
            ParseError: If date or startTime is missing or not a string
        """
        if not isinstance(data, dict):
            raise ParseError(f"Stream entry is not an object: {data!r}")

        date = data.get("date")
        start_time = data.get("startTime")
        if not isinstance(date, str) or not date.strip():
            raise ParseError(f"Stream is missing a date: {data.get('title')!r}")
        if not isinstance(start_time, str) or not start_time.strip():
            raise ParseError(f"Stream is missing a startTime: {data.get('title')!r}")

        # Values containing the key delimiter could never round-trip a footer
        if KEY_DELIMITER in date or KEY_DELIMITER in start_time:
            raise ParseError(f"Invalid date/time {date!r} {start_time!r}")

        category = data.get("category") or FALLBACK_CATEGORY
        if known_categories is not None and category not in known_categories:
            category = FALLBACK_CATEGORY

        return cls(
            date=date.strip(),
            start_time=start_time.strip(),
            title=str(data.get("title") or ""),
            description=data.get("description") or None,
            image=data.get("image") or None,
            category=str(category),
        )


@dataclass
class ScheduleDocument:
    """Root of the remote schedule JSON"""
    timezone: str = ""
    streamer: Streamer = field(default_factory=Streamer)
    categories: Dict[str, Category] = field(default_factory=dict)
    streams: List[StreamEvent] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict):
        """Parse a schedule document, dropping malformed stream entries

        Raises:
            ParseError: If the root or its streams list has the wrong shape
        """
        if not isinstance(data, dict):
            raise ParseError("Schedule document root is not an object")

        raw_streams = data.get("streams", [])
        if not isinstance(raw_streams, list):
            raise ParseError("Schedule document 'streams' is not a list")

        raw_categories = data.get("categories") or {}
        if not isinstance(raw_categories, dict):
            raw_categories = {}
        categories = {
            str(cat_id): Category.from_dict(str(cat_id), cat if isinstance(cat, dict) else {})
            for cat_id, cat in raw_categories.items()
        }

        streams = []
        for index, raw in enumerate(raw_streams):
            try:
                streams.append(StreamEvent.from_dict(raw, categories or None))
            except ParseError as e:
                log_error(e, "Dropping malformed stream", {"index": index})

        return cls(
            timezone=str(data.get("timezone") or ""),
            streamer=Streamer.from_dict(data.get("streamer")),
            categories=categories,
            streams=streams,
        )

    def get_category(self, category_id: str) -> Optional[Category]:
        """Category by id, falling back to the "other" category"""
        return self.categories.get(category_id) or self.categories.get(FALLBACK_CATEGORY)


@dataclass
class ResolvedStream:
    """A stream event pinned to an absolute instant, with its keys.

    Recomputed every refresh cycle, never persisted.
    """
    event: StreamEvent
    instant: datetime.datetime
    identity_key: str
    fingerprint: str

    @property
    def desired_key(self) -> str:
        return f"{self.identity_key}{KEY_DELIMITER}{self.fingerprint}"

    @classmethod
    def from_event(cls, event: StreamEvent, tz_name: str = None):
        """Resolve an event

        Raises:
            ParseError: If the event's date or time cannot be parsed
        """
        return cls(
            event=event,
            instant=normalize(event.date, event.start_time, tz_name),
            identity_key=identity_key(event),
            fingerprint=fingerprint(event),
        )
