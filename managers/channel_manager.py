"""
Channel management - reading the schedule channel back and rewriting it.

Works on any discord.py text channel (or an object with the same surface:
history(), delete_messages(), send() and message.delete()).
"""

import asyncio
import datetime
from typing import List, Optional

import discord

from config import config, MESSAGE_PAGE_SIZE, BULK_DELETE_MAX_AGE_DAYS, HEADER_SENTINEL
from models import RecordKind, ChannelRecord, ChannelState
from utils.error_handling import MutationError, log_error
from utils.stream_keys import parse_marker


# ============================================================================
# CHANNEL STATE READER
# ============================================================================

def get_footer_text(message) -> Optional[str]:
    """Footer text of the message's first embed, if any"""
    if not message.embeds:
        return None
    footer = message.embeds[0].footer
    return footer.text if footer else None


def classify_message(message, bot_user_id: int) -> ChannelRecord:
    """Classify one message as header, stream record or foreign"""
    kind = RecordKind.FOREIGN
    key = None

    if message.author.id == bot_user_id:
        footer = get_footer_text(message)
        if footer == HEADER_SENTINEL:
            kind = RecordKind.HEADER
        else:
            key = parse_marker(footer)
            if key:
                kind = RecordKind.STREAM

    return ChannelRecord(message=message, created_at=message.created_at, kind=kind, key=key)


async def read_channel_state(channel, bot_user_id: int, limit: int = MESSAGE_PAGE_SIZE) -> ChannelState:
    """Read one page of channel history and classify it

    Only the newest `limit` messages are read. A channel holding more than
    one page is not fully seen.
    """
    records = [classify_message(message, bot_user_id) async for message in channel.history(limit=limit)]
    # Snowflake ids grow with creation time and never tie
    records.sort(key=lambda record: record.message.id)

    state = ChannelState()
    for record in records:
        if record.kind is RecordKind.HEADER:
            state.header = record  # newest wins
        elif record.kind is RecordKind.STREAM:
            state.streams.append(record)
        else:
            state.foreign.append(record)
    return state


# ============================================================================
# CHANNEL MUTATOR
# ============================================================================

async def _delete_one(message) -> bool:
    try:
        await message.delete()
        return True
    except discord.NotFound:
        # Already gone
        return True
    except discord.HTTPException as e:
        log_error(e, "Deleting schedule message", {"message_id": message.id})
        return False


async def clear_channel(channel, now: datetime.datetime = None) -> int:
    """Delete every message in the channel, page by page

    Messages younger than two weeks go through one bulk delete per page;
    older ones are deleted individually. Failed individual deletes are
    logged and skipped. Stops once a page is empty or holds only messages
    that already failed to delete.

    Returns:
        Number of messages deleted
    """
    max_age = datetime.timedelta(days=BULK_DELETE_MAX_AGE_DAYS)
    deleted = 0
    undeletable = set()

    while True:
        messages = [message async for message in channel.history(limit=MESSAGE_PAGE_SIZE)]
        pending = [message for message in messages if message.id not in undeletable]
        if not pending:
            if messages:
                print(f"⚠️ {len(messages)} message(s) could not be deleted, leaving them")
            break

        cutoff = (now or datetime.datetime.now(datetime.timezone.utc)) - max_age
        recent = [message for message in pending if message.created_at > cutoff]
        old = [message for message in pending if message.created_at <= cutoff]

        if recent:
            try:
                await channel.delete_messages(recent)
                deleted += len(recent)
            except discord.HTTPException as e:
                log_error(e, "Bulk deleting schedule messages", {"count": len(recent)})
                old = recent + old

        for message in old:
            if await _delete_one(message):
                deleted += 1
            else:
                undeletable.add(message.id)

    if deleted:
        print(f"🗑️ Cleared {deleted} message(s)")
    return deleted


async def _send(channel, embed: discord.Embed):
    try:
        return await channel.send(embed=embed)
    except discord.HTTPException as e:
        raise MutationError(f"Failed to post {embed.title!r}: {e}") from e


async def post_schedule(channel, embeds: List[discord.Embed], footer_embed: discord.Embed,
                        delay: float = None) -> int:
    """Post each stream embed in order, then the footer marker last

    Successive posts are spaced by a fixed delay. The footer is posted even
    when there are no streams.

    Raises:
        MutationError: If a post fails. Nothing after it is posted.

    Returns:
        Number of messages posted, footer included
    """
    delay = config.POST_DELAY_SECONDS if delay is None else delay
    posted = 0

    try:
        for embed in embeds:
            if posted and delay > 0:
                await asyncio.sleep(delay)
            await _send(channel, embed)
            posted += 1

        if posted and delay > 0:
            await asyncio.sleep(delay)
        await _send(channel, footer_embed)
    except MutationError as e:
        e.posted = posted
        raise

    return posted + 1
