"""Decoding helpers for WebSocket channel names and market stats payloads."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1
_INT_RE = re.compile(r"[+-]?[0-9]+")

_MARKET_STATS_KEYS = (
    "market_id",
    "symbol",
    "mark_price",
    "index_price",
    "last_trade_price",
    "current_funding_rate",
)


def _parse_i64(text):
    """Parse a strict base-10 signed 64-bit integer, or return None."""
    if not isinstance(text, str) or not _INT_RE.fullmatch(text):
        return None
    value = int(text)
    if not _I64_MIN <= value <= _I64_MAX:
        return None
    return value


def _int_field(data, key):
    raw = data.get(key)
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise ValueError(f"field {key!r}: expected an integer, got {raw!r}")
    if isinstance(raw, int):
        if not _I64_MIN <= raw <= _I64_MAX:
            raise ValueError(f"field {key!r}: {raw} is out of range")
        return raw
    if isinstance(raw, str):
        value = _parse_i64(raw)
        if value is None:
            raise ValueError(f"field {key!r}: {raw!r} is not an integer")
        return value
    raise ValueError(f"field {key!r}: expected an integer, got {raw!r}")


def _float_field(data, key):
    raw = data.get(key)
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise ValueError(f"field {key!r}: expected a number, got {raw!r}")
    if isinstance(raw, (int, float)):
        return float(raw)
    if isinstance(raw, str):
        if raw != raw.strip() or "_" in raw:
            raise ValueError(f"field {key!r}: {raw!r} is not a number")
        try:
            return float(raw)
        except ValueError:
            raise ValueError(f"field {key!r}: {raw!r} is not a number") from None
    raise ValueError(f"field {key!r}: expected a number, got {raw!r}")


def _str_field(data, key):
    raw = data.get(key)
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise ValueError(f"field {key!r}: expected a string, got {raw!r}")
    return raw


@dataclass
class MarketStats:
    """Statistics of one market; numeric fields accept numbers or numeric strings."""

    market_id: int | None = None
    symbol: str | None = None
    mark_price: float | None = None
    index_price: float | None = None
    last_trade_price: float | None = None
    current_funding_rate: float | None = None

    @classmethod
    def from_dict(cls, data):
        """Build market stats from a JSON object; raise ValueError if it does not fit."""
        if not isinstance(data, Mapping):
            raise ValueError(f"expected a mapping, got {type(data).__name__}")
        return cls(
            market_id=_int_field(data, "market_id"),
            symbol=_str_field(data, "symbol"),
            mark_price=_float_field(data, "mark_price"),
            index_price=_float_field(data, "index_price"),
            last_trade_price=_float_field(data, "last_trade_price"),
            current_funding_rate=_float_field(data, "current_funding_rate"),
        )


@dataclass
class MarketStatsUpdate:
    """A market_stats message narrowed to a single market."""

    msg_type: str
    channel: str
    market: MarketStats | None = None


def _channel_suffix(channel):
    parts = channel.split(":")
    return parts[1] if len(parts) > 1 else None


def _second_path_segment(channel):
    parts = channel.split("/")
    return parts[1] if len(parts) > 1 else None


def parse_market_id_token(s):
    """Parse a market id from strings like "42" or "42/123"; None if not numeric."""
    return _parse_i64(s.split("/")[0])


def parse_market_id_from_channel(channel):
    """Parse the market id from channels like "order_book:42" or "order_book/42"."""
    suffix = _channel_suffix(channel)
    if suffix is not None:
        return parse_market_id_token(suffix)
    segment = _second_path_segment(channel)
    return None if segment is None else parse_market_id_token(segment)


def parse_account_id_from_channel(channel):
    """Parse the account id from channels like "user_stats/54255" or "user_stats:54255"."""
    suffix = _channel_suffix(channel)
    if suffix is not None:
        return _parse_i64(suffix)
    segment = _second_path_segment(channel)
    return None if segment is None else _parse_i64(segment)


def looks_like_market_stats_payload(value):
    """Return True if ``value`` is an object holding a single market's stats."""
    if not isinstance(value, Mapping):
        return False
    return any(key in value for key in _MARKET_STATS_KEYS)


def _str_or_empty(parsed, key):
    value = parsed.get(key)
    return value if isinstance(value, str) else ""


def parse_market_stats_updates(parsed: Any) -> list[MarketStatsUpdate]:
    """Split a market_stats message into one update per market it carries."""
    if not isinstance(parsed, Mapping):
        return []
    msg_type = _str_or_empty(parsed, "type")
    channel = _str_or_empty(parsed, "channel")

    if "market_stats" in parsed:
        payload = parsed["market_stats"]
    elif "market" in parsed:
        payload = parsed["market"]
    else:
        return []

    if looks_like_market_stats_payload(payload):
        try:
            market = MarketStats.from_dict(payload)
        except ValueError:
            return []
        return [MarketStatsUpdate(msg_type, channel, market)]

    if not isinstance(payload, Mapping):
        return []

    updates = []
    for market_key, value in sorted(payload.items()):
        if not isinstance(value, Mapping):
            continue
        try:
            market = MarketStats.from_dict(value)
        except ValueError:
            continue
        if market.market_id is None:
            market.market_id = _parse_i64(market_key)
        updates.append(MarketStatsUpdate(msg_type, channel, market))
    return updates