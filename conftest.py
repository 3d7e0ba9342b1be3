"""Shared fixtures: an in-memory stand-in for a discord.py text channel"""

import datetime
import itertools
from types import SimpleNamespace

import discord
import pytest

from models import ScheduleDocument

BOT_USER_ID = 999
OTHER_USER_ID = 123
NOW = datetime.datetime(2025, 3, 1, 12, 0, tzinfo=datetime.timezone.utc)


def http_error(status=403, reason="Forbidden", cls=discord.HTTPException):
    return cls(SimpleNamespace(status=status, reason=reason), "fake failure")


class FakeMessage:
    def __init__(self, channel, message_id, author_id, created_at, embeds=None, content=None):
        self.channel = channel
        self.id = message_id
        self.author = SimpleNamespace(id=author_id)
        self.created_at = created_at
        self.embeds = list(embeds or [])
        self.content = content
        self.undeletable = False

    @property
    def footer_text(self):
        return self.embeds[0].footer.text if self.embeds else None

    async def delete(self):
        if self.undeletable:
            raise http_error(cls=discord.Forbidden)
        self.channel.deleted_individually.append(self.id)
        self.channel.messages.remove(self)


class FakeChannel:
    """Messages are kept oldest first; history() yields newest first like Discord"""

    def __init__(self, name="schedule", clock_start=NOW):
        self.id = 4242
        self.name = name
        self.messages = []
        self.bulk_calls = []
        self.deleted_individually = []
        self.sent = []
        self.fail_send_at = None  # index of the send() call that raises
        self._ids = itertools.count(1)
        self._clock = clock_start

    def _tick(self):
        self._clock += datetime.timedelta(seconds=1)
        return self._clock

    def add_message(self, author_id=BOT_USER_ID, embeds=None, content=None, created_at=None):
        message = FakeMessage(self, next(self._ids), author_id, created_at or self._tick(), embeds, content)
        self.messages.append(message)
        self.messages.sort(key=lambda m: m.created_at)
        return message

    def add_embed(self, footer, author_id=BOT_USER_ID, created_at=None, title="embed"):
        embed = discord.Embed(title=title)
        if footer is not None:
            embed.set_footer(text=footer)
        return self.add_message(author_id=author_id, embeds=[embed], created_at=created_at)

    async def history(self, limit=100):
        for message in list(reversed(self.messages))[:limit]:
            yield message

    async def delete_messages(self, messages):
        self.bulk_calls.append([m.id for m in messages])
        for message in messages:
            self.messages.remove(message)

    async def send(self, content=None, embed=None):
        index = len(self.sent)
        if self.fail_send_at is not None and index >= self.fail_send_at:
            raise http_error(status=500, reason="Internal Server Error")
        self.sent.append(embed)
        return self.add_message(embeds=[embed] if embed else None, content=content)

    @property
    def footers(self):
        return [m.footer_text for m in self.messages]


class FakeFetcher:
    """Returns a schedule parsed from a dict, or raises a preset error"""

    def __init__(self, data=None, error=None):
        self.data = data
        self.error = error
        self.calls = 0

    async def fetch(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return ScheduleDocument.from_dict(self.data)


def _stream(date, start_time, title="Stream", category="atc", **extra):
    entry = {"date": date, "startTime": start_time, "title": title, "category": category}
    entry.update(extra)
    return entry


def _schedule(*streams, display_name="STW222"):
    return {
        "timezone": "America/New_York",
        "streamer": {"displayName": display_name, "description": "Flight sim and ATC streams"},
        "categories": {
            "atc": {"color": "#1E90FF", "label": "Air Traffic Control"},
            "flying": {"color": 0x00FF00},
            "minecraft": {"color": "0x8B4513"},
            "other": {"color": "#808080"},
        },
        "streams": list(streams),
    }


@pytest.fixture
def channel():
    return FakeChannel()


@pytest.fixture
def make_stream():
    return _stream


@pytest.fixture
def make_schedule():
    return _schedule


@pytest.fixture
def fake_fetcher():
    return FakeFetcher


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def bot_user_id():
    return BOT_USER_ID


@pytest.fixture
def other_user_id():
    return OTHER_USER_ID


@pytest.fixture
def make_http_error():
    return http_error
