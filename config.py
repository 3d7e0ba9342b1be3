"""
Configuration module for the stream schedule bot

This module centralizes all configuration constants, environment variables,
and file paths used throughout the bot.
"""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

# ============================================================================
# ENVIRONMENT SETUP
# ============================================================================

# Load environment variables from .env file (use absolute path for hosting)
SCRIPT_DIR = os.path.dirname(os.path.realpath(__file__))
_ENV_FILE = os.path.join(SCRIPT_DIR, '.env')

if os.path.exists(_ENV_FILE):
    print(f"🔍 Loading .env from: {_ENV_FILE}")

load_dotenv(_ENV_FILE)

# ============================================================================
# FILE PATHS
# ============================================================================

# Error logging
LOGS_DIR = os.path.join(SCRIPT_DIR, "logs")
os.makedirs(LOGS_DIR, exist_ok=True)

# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def parse_int(env_var: str, default: int = 0) -> int:
    """Parse an integer from environment variable, falling back to default"""
    value = os.getenv(env_var, "")
    if not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError:
        print(f"⚠️ {env_var} is not an integer: {value!r}, using {default}")
        return default


def parse_float(env_var: str, default: float = 0.0) -> float:
    """Parse a float from environment variable, falling back to default"""
    value = os.getenv(env_var, "")
    if not value.strip():
        return default
    try:
        return float(value.strip())
    except ValueError:
        print(f"⚠️ {env_var} is not a number: {value!r}, using {default}")
        return default


# ============================================================================
# SCHEDULE SYSTEM
# ============================================================================

DEFAULT_SCHEDULE_URL = "https://raw.githubusercontent.com/stw222/stw222-schedule/main/data/schedule.json"
DEFAULT_SCHEDULE_TIMEZONE = "America/New_York"

# Discord returns at most 100 messages per history request
MESSAGE_PAGE_SIZE = 100

# Bulk delete rejects messages older than two weeks
BULK_DELETE_MAX_AGE_DAYS = 14

FINGERPRINT_LENGTH = 8

# Footer of the trailing marker message. Must never contain "|".
HEADER_SENTINEL = "📌 Stream schedule • times shown in your local timezone"

# Category emojis used in stream embed titles
CATEGORY_EMOJIS = {
    "atc": "<:radar:1455791581268541556>",
    "flying": "<:airplane:1455791579032977671>",
    "minecraft": "<:minecraft:1455791577816502384>",
    "other": "<:tooltipquestion:1455791783538724914>",
}
DEFAULT_CATEGORY_EMOJI = "🎮"
DEFAULT_CATEGORY_COLOR = 0x808080

SCHEDULE_EMPTY_MESSAGE = "No upcoming streams scheduled!"

# ============================================================================
# BOT CONFIGURATION
# ============================================================================

@dataclass
class BotConfig:
    """Bot configuration constants"""
    DISCORD_BOT_TOKEN: str = None
    CHANNEL_ID: int = 0
    GUILD_ID: int = 0
    SCHEDULE_URL: str = DEFAULT_SCHEDULE_URL
    SCHEDULE_TIMEZONE: str = DEFAULT_SCHEDULE_TIMEZONE
    REFRESH_INTERVAL_MINUTES: int = 60
    POST_DELAY_SECONDS: float = 0.5
    FETCH_TIMEOUT_SECONDS: int = 30

    def __post_init__(self):
        # Load from environment variables for security
        self.DISCORD_BOT_TOKEN = os.getenv('DISCORD_BOT_TOKEN', '')  # Must be set in .env
        self.CHANNEL_ID = parse_int('CHANNEL_ID')
        self.GUILD_ID = parse_int('GUILD_ID')
        self.SCHEDULE_URL = os.getenv('SCHEDULE_URL', '') or DEFAULT_SCHEDULE_URL
        self.SCHEDULE_TIMEZONE = os.getenv('SCHEDULE_TIMEZONE', '') or DEFAULT_SCHEDULE_TIMEZONE
        self.REFRESH_INTERVAL_MINUTES = max(1, parse_int('REFRESH_INTERVAL_MINUTES', 60))
        self.POST_DELAY_SECONDS = max(0.0, parse_float('POST_DELAY_SECONDS', 0.5))


config = BotConfig()
