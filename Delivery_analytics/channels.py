"""Delivery channel enumeration and lookup tables."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional


class Channel(str, Enum):
    TALABAT = "Talabat"
    DELIVEROO = "Deliveroo"
    CAREEM = "Careem"
    NOON = "Noon"
    KEETA = "Keeta"


# Enumeration order is also the tie-break order for "dominant channel" lookups.
CHANNELS: tuple[Channel, ...] = tuple(Channel)
CHANNEL_NAMES: tuple[str, ...] = tuple(channel.value for channel in CHANNELS)

_IDENTIFIERS: Dict[str, Channel] = {
    "talabat": Channel.TALABAT,
    "deliveroo": Channel.DELIVEROO,
    "careem": Channel.CAREEM,
    "noon": Channel.NOON,
    "keeta": Channel.KEETA,
}

CHANNEL_COLORS: Dict[Channel, str] = {
    Channel.TALABAT: "#F97316",
    Channel.DELIVEROO: "#06B6D4",
    Channel.CAREEM: "#10B981",
    Channel.NOON: "#FDE047",
    Channel.KEETA: "#6B7280",
}


def normalize_channel(raw: object) -> Optional[Channel]:
    """Map a free-text channel label to :class:`Channel`.

    Matching is exact and case-insensitive. Anything else (including empty strings,
    ``None`` and NaN) returns ``None`` so callers can drop the record.
    """

    if not isinstance(raw, str):
        return None
    return _IDENTIFIERS.get(raw.lower())


def channel_color(channel: Channel) -> str:
    return CHANNEL_COLORS[channel]
