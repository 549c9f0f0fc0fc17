"""Parsing of relative expiration times.

Stored requests accept their lifetime as seconds, a ``timedelta`` or a short
relative phrase such as ``"10 minutes"`` or ``"+ 30 seconds"``.
"""

import re
from datetime import timedelta

UNIT_SECONDS = {
    "sec": 1,
    "second": 1,
    "min": 60,
    "minute": 60,
    "hour": 3600,
    "day": 86400,
    "week": 604800,
}

_PHRASE = re.compile(r"^\+?\s*(\d+)\s*([a-z]+?)s?$")


def parse_expiration(value: int | float | timedelta | str) -> int:
    """Convert a relative expiration to whole seconds.

    Args:
        value: Seconds, a timedelta, or a phrase like ``"10 minutes"``.

    Returns:
        The expiration in seconds, at least 1.

    Raises:
        ValueError: If the value is not positive or the phrase is unknown.

    Examples:
        >>> parse_expiration("10 minutes")
        600
        >>> parse_expiration("+ 1 hour")
        3600
        >>> parse_expiration(timedelta(seconds=90))
        90
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid expiration: {value!r}")

    if isinstance(value, timedelta):
        seconds = int(value.total_seconds())
    elif isinstance(value, (int, float)):
        seconds = int(value)
    elif isinstance(value, str):
        seconds = _parse_phrase(value)
    else:
        raise ValueError(f"Invalid expiration: {value!r}")

    if seconds < 1:
        raise ValueError(f"Expiration must be at least 1 second, got {seconds}")
    return seconds


def _parse_phrase(phrase: str) -> int:
    text = phrase.strip().lower()
    if text.isdigit():
        return int(text)

    match = _PHRASE.match(text)
    if match is None or match.group(2) not in UNIT_SECONDS:
        raise ValueError(f"Invalid expiration: {phrase!r}")
    return int(match.group(1)) * UNIT_SECONDS[match.group(2)]
