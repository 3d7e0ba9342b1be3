"""
Stream identity keys, content fingerprints and the footer marker format.

A stream message carries "<displayName> | <date>|<startTime>|<fingerprint>"
in its embed footer. The key survives restarts because it lives in the
channel itself.
"""

import json
import hashlib
from typing import Optional
from config import FINGERPRINT_LENGTH, HEADER_SENTINEL

KEY_DELIMITER = "|"
PREFIX_SEPARATOR = " | "

# Pipes in the author prefix are replaced so the first "|" ends the prefix
ESCAPED_DELIMITER = "¦"


def identity_key(event) -> str:
    """Calendar slot of an event: date and start time exactly as published"""
    return f"{event.date}{KEY_DELIMITER}{event.start_time}"


def fingerprint(event) -> str:
    """Short hash over every visible content field of an event"""
    fields = [
        event.date,
        event.start_time,
        event.title,
        event.description or "",
        event.image or "",
        event.category,
    ]
    payload = json.dumps(fields, ensure_ascii=False, separators=(",", ":"))
    return hashlib.md5(payload.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def desired_key(event) -> str:
    """Identity key plus fingerprint, the unit compared between cycles"""
    return f"{identity_key(event)}{KEY_DELIMITER}{fingerprint(event)}"


def escape_prefix(display_name: str) -> str:
    return (display_name or "").replace(KEY_DELIMITER, ESCAPED_DELIMITER).strip()


def serialize_marker(display_name: str, key: str) -> str:
    """Build the footer text for a stream message"""
    return f"{escape_prefix(display_name)}{PREFIX_SEPARATOR}{key}"


def parse_marker(text: Optional[str]) -> Optional[str]:
    """Extract the stream key from footer text

    Returns:
        The key with segments trimmed and re-joined by "|", or None if the
        text is not a stream marker (no prefix, fewer than two segments
        after it, or an empty segment).
    """
    if not text or text == HEADER_SENTINEL or KEY_DELIMITER not in text:
        return None

    segments = [part.strip() for part in text.split(KEY_DELIMITER)[1:]]
    if len(segments) < 2 or not all(segments):
        return None
    return KEY_DELIMITER.join(segments)
