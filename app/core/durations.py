"""Parsing of Go-style duration strings (``"15m"``, ``"1h30m"``, ``"1.5s"``).

Object-storage settings are shared with services written against Go's
``time.ParseDuration``, so the expiry is stored in that format.
"""

from __future__ import annotations

import re
from datetime import timedelta

from app.core.exceptions import ConfigurationError

_UNITS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(value: str) -> timedelta:
    """Convert a duration string into a :class:`timedelta`.

    Raises :class:`ConfigurationError` when *value* is not a valid duration.
    """
    text = (value or "").strip()
    if not text:
        raise ConfigurationError("Invalid duration ''")

    sign = 1
    if text[0] in "+-":
        sign = -1 if text[0] == "-" else 1
        text = text[1:]

    if text == "0":
        return timedelta(0)

    seconds = 0.0
    pos = 0
    while pos < len(text):
        match = _COMPONENT.match(text, pos)
        if match is None:
            raise ConfigurationError(f"Invalid duration '{value}'")
        number, unit = match.groups()
        seconds += float(number) * _UNITS[unit]
        pos = match.end()

    if pos == 0:
        raise ConfigurationError(f"Invalid duration '{value}'")

    return timedelta(seconds=sign * seconds)
