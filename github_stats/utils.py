"""Shared utility helpers for the commit statistics collector."""

from __future__ import annotations

import re
from datetime import timedelta
from urllib.parse import urlparse

__all__ = ["parse_duration", "validate_url", "mask_token"]

_DURATION_PART = re.compile(r"(?P<value>[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?P<unit>ns|us|µs|ms|s|m|h)")

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(text: str) -> timedelta:
    """Parse a Go-style duration string such as ``1h``, ``90m`` or ``1h30m``.

    Args:
        text: Duration made of one or more ``<number><unit>`` parts

    Returns:
        The duration as a timedelta

    Raises:
        ValueError: If the string is empty or has an unknown unit

    Examples:
        >>> parse_duration("1h30m")
        datetime.timedelta(seconds=5400)
    """
    value = (text or "").strip()
    if not value:
        raise ValueError("duration cannot be empty")

    sign = 1
    if value[0] in "+-":
        sign = -1 if value[0] == "-" else 1
        value = value[1:]
    if value == "0":
        return timedelta(0)

    seconds = 0.0
    position = 0
    for match in _DURATION_PART.finditer(value):
        if match.start() != position:
            break
        seconds += float(match.group("value")) * _UNIT_SECONDS[match.group("unit")]
        position = match.end()

    if position == 0 or position != len(value):
        raise ValueError(f"invalid duration: {text!r}")
    return timedelta(seconds=sign * seconds)


def validate_url(url: str) -> bool:
    """Check that ``url`` is an absolute HTTP(S) URL."""
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def mask_token(token: str) -> str:
    """Hide all but the last four characters of a token."""
    if not token:
        return ""
    if len(token) <= 4:
        return "*" * len(token)
    return "*" * (len(token) - 4) + token[-4:]
