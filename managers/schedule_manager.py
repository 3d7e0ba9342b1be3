"""
Schedule management - fetching the remote schedule and resolving upcoming streams.
"""

import json
import asyncio
import datetime
from typing import List, Optional, Tuple

import aiohttp

from config import config
from models import ScheduleDocument, ResolvedStream
from utils.error_handling import FetchError, ParseError, log_error
from utils.timestamp import get_zone


class ScheduleFetcher:
    """Fetch schedule.json over HTTP

    Remembers the last ETag in memory; a 304 Not Modified returns the
    document parsed on the previous fetch. No retries: a failed fetch is
    retried by the next refresh cycle.
    """

    def __init__(self, url: str = None, timeout: int = None, session: aiohttp.ClientSession = None):
        self.url = url or config.SCHEDULE_URL
        self.timeout = aiohttp.ClientTimeout(total=timeout or config.FETCH_TIMEOUT_SECONDS)
        self.session = session
        self.last_etag: Optional[str] = None
        self.last_document: Optional[ScheduleDocument] = None

    async def fetch(self) -> ScheduleDocument:
        """Fetch and parse the schedule document

        Raises:
            FetchError: On transport failure, non-200 status or a body that is
                not a schedule document
        """
        headers = {}
        if self.last_etag and self.last_document is not None:
            headers["If-None-Match"] = self.last_etag

        try:
            if self.session is not None:
                return await self._fetch_with(self.session, headers)
            async with aiohttp.ClientSession() as session:
                return await self._fetch_with(session, headers)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FetchError(f"Failed to fetch schedule: {type(e).__name__}: {e}") from e

    async def _fetch_with(self, session: aiohttp.ClientSession, headers: dict) -> ScheduleDocument:
        async with session.get(self.url, headers=headers, timeout=self.timeout) as resp:
            if resp.status == 304 and self.last_document is not None:
                # Not modified
                return self.last_document

            if resp.status != 200:
                raise FetchError(f"Failed to fetch schedule: HTTP {resp.status}", status=resp.status)

            # GitHub raw returns text/plain, need to ignore content-type
            try:
                data = await resp.json(content_type=None)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise FetchError(f"Schedule is not valid JSON: {e}") from e

            try:
                document = ScheduleDocument.from_dict(data)
            except ParseError as e:
                raise FetchError(f"Schedule document is malformed: {e}") from e

            self.last_etag = resp.headers.get("ETag")
            self.last_document = document
            print(f"✅ Schedule fetched: {len(document.streams)} streams")
            return document


def resolve_streams(document: ScheduleDocument, tz_name: str = None) -> List[ResolvedStream]:
    """Resolve every event, dropping (and logging) the ones that fail to parse

    Raises:
        ConfigError: If the reference timezone is unknown, even when the
            schedule is empty
    """
    get_zone(tz_name)

    resolved = []
    for event in document.streams:
        try:
            resolved.append(ResolvedStream.from_event(event, tz_name))
        except ParseError as e:
            log_error(e, "Dropping stream with bad date/time", {
                "date": event.date,
                "startTime": event.start_time,
                "title": event.title,
            })
    return resolved


def get_upcoming_streams(document: ScheduleDocument, now: datetime.datetime = None,
                         tz_name: str = None) -> List[ResolvedStream]:
    """Streams starting after now, soonest first

    This is the desired ordered list the channel must show.
    """
    now = now or datetime.datetime.now(datetime.timezone.utc)
    upcoming = [stream for stream in resolve_streams(document, tz_name) if stream.instant > now]
    upcoming.sort(key=lambda stream: stream.instant)
    return upcoming


async def preview_schedule(fetcher: ScheduleFetcher, limit: int = None,
                           now: datetime.datetime = None,
                           tz_name: str = None) -> Tuple[ScheduleDocument, List[ResolvedStream]]:
    """Fetch and resolve the schedule without touching any channel

    Used by the read-only /schedule and /nextstream commands.

    Raises:
        FetchError: If the schedule cannot be fetched
    """
    document = await fetcher.fetch()
    upcoming = get_upcoming_streams(document, now=now, tz_name=tz_name)
    if limit is not None:
        upcoming = upcoming[:limit]
    return document, upcoming
