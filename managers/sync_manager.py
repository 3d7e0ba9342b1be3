"""
Schedule sync - compares the desired stream list with the channel and rebuilds
the channel when they differ.

One refresh cycle:
    Idle -> Fetching -> (FetchFailed | Resolved) -> Reading -> Comparing
         -> (NoOp | Clearing -> Posting) -> Idle
"""

import asyncio
import datetime
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from config import config
from models import ScheduleDocument, ResolvedStream, ChannelState
from managers.schedule_manager import ScheduleFetcher, get_upcoming_streams
from managers.channel_manager import read_channel_state, clear_channel, post_schedule
from utils.error_handling import FetchError, MutationError, ConfigError, log_error, is_retryable_error
from utils.formatting import create_stream_embed, create_header_embed


class Decision(Enum):
    NOOP = "noop"
    REBUILD = "rebuild"


@dataclass
class SyncResult:
    """Outcome of one refresh cycle"""
    decision: Optional[Decision] = None
    stream_count: int = 0
    deleted: int = 0
    posted: int = 0
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def reconcile(desired: List[ResolvedStream], observed: ChannelState) -> Decision:
    """NoOp only if the header is present and the channel's stream keys equal
    the desired keys, element by element, in order.
    """
    if observed.header is None:
        return Decision.REBUILD
    if observed.keys != [stream.desired_key for stream in desired]:
        return Decision.REBUILD
    return Decision.NOOP


class ScheduleSync:
    """Keeps one channel in line with the schedule

    Cycles hold a per-channel lock from start to finish, so a timer cycle and
    a command cycle never interleave; the later one waits.

    Args:
        channel: discord.py text channel (or compatible fake)
        bot_user_id: id of the bot user; only its messages can be records
        fetcher: object with an async fetch() -> ScheduleDocument
        clock: returns the current aware UTC datetime
    """

    def __init__(self, channel, bot_user_id: int, fetcher: ScheduleFetcher = None,
                 post_delay: float = None, tz_name: str = None,
                 clock: Callable[[], datetime.datetime] = None):
        self.channel = channel
        self.bot_user_id = bot_user_id
        self.fetcher = fetcher or ScheduleFetcher()
        self.post_delay = config.POST_DELAY_SECONDS if post_delay is None else post_delay
        self.tz_name = tz_name
        self.clock = clock or (lambda: datetime.datetime.now(datetime.timezone.utc))
        self.lock = asyncio.Lock()

    @property
    def channel_name(self) -> str:
        return getattr(self.channel, "name", None) or str(getattr(self.channel, "id", "?"))

    async def rebuild(self, document: ScheduleDocument, desired: List[ResolvedStream],
                      result: SyncResult) -> SyncResult:
        """Clear the channel and post every desired stream, then the header"""
        result.decision = Decision.REBUILD
        print(f"🔄 Rebuilding #{self.channel_name} with {len(desired)} stream(s)...")

        result.deleted = await clear_channel(self.channel, now=self.clock())

        embeds = [create_stream_embed(stream, document) for stream in desired]
        header = create_header_embed(document, len(desired))
        result.posted = await post_schedule(self.channel, embeds, header, delay=self.post_delay)

        print(f"✅ Schedule rebuilt in #{self.channel_name}: "
              f"removed {result.deleted}, posted {result.posted}")
        return result

    async def run_cycle(self, force: bool = False) -> SyncResult:
        """Run one refresh cycle

        Never raises: failures are logged and returned in SyncResult.error.
        Whatever the channel shows afterwards is what the next cycle reads.

        Args:
            force: Rebuild even if the channel already matches (hard reset)
        """
        result = SyncResult()

        async with self.lock:
            try:
                document = await self.fetcher.fetch()
                desired = get_upcoming_streams(document, now=self.clock(), tz_name=self.tz_name)
                result.stream_count = len(desired)

                if not force:
                    observed = await read_channel_state(self.channel, self.bot_user_id)
                    if reconcile(desired, observed) is Decision.NOOP:
                        result.decision = Decision.NOOP
                        print(f"✅ #{self.channel_name} is up to date ({len(desired)} stream(s))")
                        return result

                return await self.rebuild(document, desired, result)

            except FetchError as e:
                result.error = e
                hint = "will retry next cycle" if is_retryable_error(e) else "channel left untouched"
                log_error(e, f"Schedule fetch failed, {hint}", {"channel": self.channel_name})
            except ConfigError as e:
                result.error = e
                log_error(e, "Schedule refresh aborted by bad configuration, channel left untouched",
                          {"channel": self.channel_name})
            except MutationError as e:
                result.error = e
                result.posted = e.posted
                log_error(e, "Schedule rebuild incomplete, header missing until next cycle",
                          {"channel": self.channel_name, "posted": result.posted})
            except Exception as e:
                result.error = e
                log_error(e, "Schedule refresh cycle failed", {"channel": self.channel_name})

        return result
