"""Test bot.py wiring: module loads, commands registered, replies formatted"""

import asyncio
from types import SimpleNamespace

import pytest

from managers import Decision, SyncResult
from utils.error_handling import FetchError


def test_bot_module_loads():
    import bot

    assert bot.client.fetcher is not None
    assert bot.client.schedule_sync is None


def test_slash_commands_registered():
    import bot

    names = {command.name for command in bot.client.tree.get_commands()}
    assert names == {"refresh", "hardreset", "schedule", "nextstream"}


def test_commands_default_to_administrators():
    import bot

    for command in bot.client.tree.get_commands():
        assert command.default_permissions is not None
        assert command.default_permissions.administrator


def test_describe_result():
    import bot

    noop = SyncResult(decision=Decision.NOOP, stream_count=3)
    assert "already up to date" in bot.describe_result(noop)

    rebuilt = SyncResult(decision=Decision.REBUILD, stream_count=2, deleted=5, posted=3)
    assert bot.describe_result(rebuilt) == (
        "✅ Schedule channel rebuilt: removed 5 message(s), posted 2 stream(s)."
    )

    failed = SyncResult(error=FetchError("Failed to fetch schedule: HTTP 503", status=503))
    assert bot.describe_result(failed).startswith("❌")


def test_concurrent_callers_share_one_schedule_sync(monkeypatch, channel, bot_user_id):
    import bot
    import discord

    class UncachedBot(bot.ScheduleBot):
        user = SimpleNamespace(id=bot_user_id)
        fetch_calls = 0

        def get_channel(self, channel_id):
            return None

        async def fetch_channel(self, channel_id):
            UncachedBot.fetch_calls += 1
            await asyncio.sleep(0.01)
            return channel

    monkeypatch.setattr(bot.config, "CHANNEL_ID", channel.id)
    monkeypatch.setattr(bot, "TEXT_CHANNEL_TYPES", (type(channel),))
    test_client = UncachedBot(intents=discord.Intents.default())

    async def resolve_twice():
        return await asyncio.gather(test_client.get_schedule_sync(), test_client.get_schedule_sync())

    first, second = asyncio.run(resolve_twice())

    assert first is not None
    assert first is second
    assert first.lock is second.lock
    assert UncachedBot.fetch_calls == 1


def test_main_exits_on_unknown_timezone(monkeypatch):
    import bot

    started = []
    monkeypatch.setattr(bot.config, "DISCORD_BOT_TOKEN", "token")
    monkeypatch.setattr(bot.config, "SCHEDULE_TIMEZONE", "America/NewYork")
    monkeypatch.setattr(bot.client, "run", lambda token: started.append(token))

    with pytest.raises(SystemExit) as excinfo:
        bot.main()

    assert excinfo.value.code == 1
    assert started == []
