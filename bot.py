import discord
from discord import app_commands
from discord.ext import tasks
import sys
import asyncio
from typing import Optional

from config import config, SCHEDULE_EMPTY_MESSAGE
from managers import ScheduleFetcher, ScheduleSync, SyncResult, Decision, preview_schedule
from utils import log_error, create_stream_embed, get_zone, ConfigError


TEXT_CHANNEL_TYPES = (discord.TextChannel, discord.Thread, discord.VoiceChannel)


# ============================================================================
# DISCORD BOT CLIENT
# ============================================================================

class ScheduleBot(discord.Client):
    """Discord client that keeps one channel in line with the stream schedule"""

    def __init__(self, *, intents: discord.Intents):
        super().__init__(intents=intents)
        self.tree = app_commands.CommandTree(self)
        self.fetcher = ScheduleFetcher()
        self.schedule_sync: Optional[ScheduleSync] = None
        self._sync_resolve_lock = asyncio.Lock()

    async def setup_hook(self):
        """Sync slash commands - instantly to one guild if GUILD_ID is set"""
        if config.GUILD_ID:
            guild = discord.Object(id=config.GUILD_ID)
            self.tree.copy_global_to(guild=guild)
            await self.tree.sync(guild=guild)
            print(f"✅ Commands synced to guild {config.GUILD_ID} (instant)")
        else:
            await self.tree.sync()
            print("✅ Commands synced globally (may take up to 1 hour)")

    async def get_schedule_sync(self) -> Optional[ScheduleSync]:
        """Resolve the schedule channel once and keep its sync (and lock) for the process

        Concurrent callers wait on the same resolution, so there is only ever
        one ScheduleSync and one per-channel lock.
        """
        async with self._sync_resolve_lock:
            if self.schedule_sync is not None:
                return self.schedule_sync

            if not config.CHANNEL_ID:
                print("⚠️ CHANNEL_ID is not set, schedule channel sync disabled")
                return None

            channel = self.get_channel(config.CHANNEL_ID)
            if channel is None:
                try:
                    channel = await self.fetch_channel(config.CHANNEL_ID)
                except discord.HTTPException as e:
                    log_error(e, "Fetching schedule channel", {"channel_id": config.CHANNEL_ID})
                    return None

            if not isinstance(channel, TEXT_CHANNEL_TYPES):
                print(f"❌ Channel {config.CHANNEL_ID} is not a text channel")
                return None

            self.schedule_sync = ScheduleSync(channel, self.user.id, fetcher=self.fetcher)
            return self.schedule_sync


intents = discord.Intents.default()
client = ScheduleBot(intents=intents)


def describe_result(result: SyncResult) -> str:
    """Short summary of a refresh cycle for command replies"""
    if result.error is not None:
        return f"❌ Schedule refresh failed: {result.error}"
    if result.decision is Decision.NOOP:
        return f"✅ Schedule channel is already up to date ({result.stream_count} upcoming streams)."
    return (f"✅ Schedule channel rebuilt: removed {result.deleted} message(s), "
            f"posted {result.stream_count} stream(s).")


# ============================================================================
# SCHEDULED TASK - REFRESH SCHEDULE CHANNEL
# ============================================================================

@tasks.loop(minutes=60)
async def refresh_schedule_task():
    """Periodic refresh cycle"""
    sync = await client.get_schedule_sync()
    if sync is None:
        return
    await sync.run_cycle()


@refresh_schedule_task.before_loop
async def before_refresh_schedule():
    """Wait for bot to be ready before the first cycle"""
    await client.wait_until_ready()
    print(f"✅ Schedule refresh task ready (runs every {config.REFRESH_INTERVAL_MINUTES} min)")


# ============================================================================
# SLASH COMMANDS
# ============================================================================

@client.tree.command(name="refresh", description="Refresh the schedule channel")
@app_commands.default_permissions(administrator=True)
async def refresh_command(interaction: discord.Interaction):
    await interaction.response.defer(ephemeral=True)

    sync = await client.get_schedule_sync()
    if sync is None:
        await interaction.followup.send("❌ Schedule channel is not configured.", ephemeral=True)
        return

    result = await sync.run_cycle()
    await interaction.followup.send(describe_result(result), ephemeral=True)


@client.tree.command(name="hardreset", description="Clear channel and repost all streams")
@app_commands.default_permissions(administrator=True)
async def hardreset_command(interaction: discord.Interaction):
    await interaction.response.defer(ephemeral=True)

    sync = await client.get_schedule_sync()
    if sync is None:
        await interaction.followup.send("❌ Schedule channel is not configured.", ephemeral=True)
        return

    result = await sync.run_cycle(force=True)
    await interaction.followup.send(describe_result(result), ephemeral=True)


@client.tree.command(name="schedule", description="Show upcoming streams")
@app_commands.default_permissions(administrator=True)
@app_commands.describe(limit="Number of streams to show (default: 5, max: 10)")
async def schedule_command(interaction: discord.Interaction,
                           limit: Optional[app_commands.Range[int, 1, 10]] = None):
    await interaction.response.defer()

    document, upcoming = await preview_schedule(client.fetcher, limit=limit or 5)
    if not upcoming:
        await interaction.followup.send(SCHEDULE_EMPTY_MESSAGE)
        return

    embeds = [create_stream_embed(stream, document) for stream in upcoming]
    await interaction.followup.send(embeds=embeds)


@client.tree.command(name="nextstream", description="Show the next upcoming stream")
@app_commands.default_permissions(administrator=True)
async def nextstream_command(interaction: discord.Interaction):
    await interaction.response.defer()

    document, upcoming = await preview_schedule(client.fetcher, limit=1)
    if not upcoming:
        await interaction.followup.send(SCHEDULE_EMPTY_MESSAGE)
        return

    await interaction.followup.send(embed=create_stream_embed(upcoming[0], document))


@client.tree.error
async def on_command_error(interaction: discord.Interaction, error: app_commands.AppCommandError):
    """Log the failure and tell the user without leaking details"""
    command_name = interaction.command.name if interaction.command else "unknown"
    log_error(getattr(error, "original", error), "Handling command", {"command": command_name})

    try:
        if interaction.response.is_done():
            await interaction.followup.send("An error occurred while processing the command.", ephemeral=True)
        else:
            await interaction.response.send_message(
                "An error occurred while fetching the schedule.", ephemeral=True
            )
    except discord.HTTPException as e:
        log_error(e, "Sending command error reply", {"command": command_name})


# ============================================================================
# START SCHEDULED TASKS ON READY
# ============================================================================

@client.event
async def on_ready():
    """Start the refresh task when bot is ready"""
    print(f"✅ Logged in as {client.user} (ID: {client.user.id})")

    # First iteration runs immediately, so the channel is synced on startup
    if not refresh_schedule_task.is_running():
        refresh_schedule_task.change_interval(minutes=config.REFRESH_INTERVAL_MINUTES)
        refresh_schedule_task.start()

    print("🚀 Bot is ready!")


def main():
    if not config.DISCORD_BOT_TOKEN:
        print("ERROR: DISCORD_BOT_TOKEN environment variable is not set!")
        print("Please create a .env file with:")
        print("    DISCORD_BOT_TOKEN=your_bot_token_here")
        print("    CHANNEL_ID=your_schedule_channel_id")
        sys.exit(1)

    try:
        get_zone(config.SCHEDULE_TIMEZONE)
    except ConfigError as e:
        print(f"ERROR: {e}")
        print("Please set SCHEDULE_TIMEZONE to an IANA name such as America/New_York")
        sys.exit(1)

    try:
        print("Starting bot...")
        client.run(config.DISCORD_BOT_TOKEN)
    except discord.LoginFailure:
        print("ERROR: Invalid Bot Token.")
        print("Please check your token at: https://discord.com/developers/applications")
        sys.exit(1)


if __name__ == "__main__":
    main()
