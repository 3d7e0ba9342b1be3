"""
Embed formatting for stream messages and the trailing schedule marker.
"""

import discord
from config import (
    CATEGORY_EMOJIS,
    DEFAULT_CATEGORY_EMOJI,
    DEFAULT_CATEGORY_COLOR,
    HEADER_SENTINEL,
    SCHEDULE_EMPTY_MESSAGE,
)
from utils.stream_keys import serialize_marker
from utils.timestamp import to_discord_timestamp


def format_category_label(category_id: str) -> str:
    """Capitalize the first letter: "minecraft" -> "Minecraft" """
    if not category_id:
        return ""
    return category_id[0].upper() + category_id[1:]


def get_category_emoji(category_id: str) -> str:
    return CATEGORY_EMOJIS.get(category_id, DEFAULT_CATEGORY_EMOJI)


def create_stream_embed(stream, document) -> discord.Embed:
    """Create the embed for one upcoming stream

    The footer carries the stream's desired key, so the message can be
    recognized when the channel is read back.

    Args:
        stream: ResolvedStream to render
        document: ScheduleDocument it came from (streamer + categories)
    """
    event = stream.event
    category = document.get_category(event.category)
    color = category.color if category else DEFAULT_CATEGORY_COLOR

    embed = discord.Embed(
        title=f"{get_category_emoji(event.category)} {event.title}",
        description=event.description or "No description available",
        color=color
    )
    embed.add_field(name="📅 Date & Time", value=to_discord_timestamp(stream.instant, "F"), inline=True)
    embed.add_field(name="⏰ Countdown", value=to_discord_timestamp(stream.instant, "R"), inline=True)
    embed.add_field(name="🏷️ Category", value=format_category_label(event.category), inline=True)

    if event.image:
        embed.set_image(url=event.image)

    embed.set_footer(text=serialize_marker(document.streamer.display_name, stream.desired_key))
    return embed


def create_header_embed(document, stream_count: int) -> discord.Embed:
    """Create the trailing marker embed posted after every rebuild

    Its footer is the fixed header sentinel. Its presence as the last message
    means the previous rebuild completed.
    """
    name = document.streamer.display_name if document else ""
    title = f"📅 {name} Stream Schedule" if name else "📅 Stream Schedule"

    if stream_count:
        noun = "stream" if stream_count == 1 else "streams"
        description = f"**{stream_count} upcoming {noun}** listed above."
    else:
        description = SCHEDULE_EMPTY_MESSAGE

    if document and document.streamer.description:
        description = f"{document.streamer.description}\n\n{description}"

    embed = discord.Embed(title=title, description=description, color=discord.Color.gold())
    embed.set_footer(text=HEADER_SENTINEL)
    return embed
