"""
Timestamp normalization for server payloads.

The service is not consistent about how it encodes instants: epoch numbers in
seconds or milliseconds, ISO-8601 strings with or without fractional seconds
and offsets, and a plain `yyyy-MM-dd HH:mm:ss` form. `parse_instant` turns any
of these into an aware UTC datetime.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, List, Optional

from api.errors import DecodingError

# above this magnitude an epoch number is read as milliseconds
EPOCH_MILLIS_THRESHOLD = 1_000_000_000_000

_ISO_RE = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})T(?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d+))?"
    r"(?P<tz>Z|z|[+-]\d{2}:\d{2})$"
)

# explicit patterns, tried in order once the ISO parsers give up
FALLBACK_PATTERNS = [
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
]


def _from_epoch(value: float) -> datetime:
    if abs(value) > EPOCH_MILLIS_THRESHOLD:
        value = value / 1000
    return datetime.fromtimestamp(value, tz=timezone.utc)


def _iso(value: str, fractional: bool) -> Optional[datetime]:
    m = _ISO_RE.match(value)
    if not m or (m.group("frac") is not None) != fractional:
        return None
    try:
        base = datetime.strptime(f"{m['date']}T{m['time']}", "%Y-%m-%dT%H:%M:%S")
    except ValueError:
        return None
    if m["frac"]:
        # nanosecond fractions are cut down to microseconds
        base = base.replace(microsecond=int(m["frac"][:6].ljust(6, "0")))
    tz = m["tz"]
    if tz in ("Z", "z"):
        offset = timezone.utc
    else:
        sign = -1 if tz[0] == "-" else 1
        hours, minutes = int(tz[1:3]), int(tz[4:6])
        offset = timezone(sign * timedelta(hours=hours, minutes=minutes))
    return base.replace(tzinfo=offset).astimezone(timezone.utc)


def _iso_fractional(value: str) -> Optional[datetime]:
    return _iso(value, fractional=True)


def _iso_plain(value: str) -> Optional[datetime]:
    return _iso(value, fractional=False)


def _pattern(fmt: str) -> Callable[[str], Optional[datetime]]:
    def parse(value: str) -> Optional[datetime]:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            # offset-less values are taken as UTC
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)

    parse.__name__ = f"pattern[{fmt}]"
    return parse


STRING_PARSERS: List[Callable[[str], Optional[datetime]]] = [
    _iso_fractional,
    _iso_plain,
    *(_pattern(fmt) for fmt in FALLBACK_PATTERNS),
]


def parse_instant(value: Any) -> datetime:
    """
    Parse a server-supplied timestamp into an aware UTC datetime.

    Args:
        value: epoch number (seconds, or milliseconds above 10^12) or string.

    Returns:
        datetime: the instant, tzinfo=UTC.

    Raises:
        DecodingError: no candidate parser accepted the value.
    """
    if isinstance(value, bool):
        raise DecodingError(f"Invalid date: {value!r}", raw=value)

    if isinstance(value, (int, float)):
        try:
            return _from_epoch(value)
        except (OverflowError, OSError, ValueError):
            raise DecodingError(f"Invalid date: {value!r}", raw=value)

    if isinstance(value, str):
        for parser in STRING_PARSERS:
            parsed = parser(value)
            if parsed is not None:
                return parsed

    raise DecodingError(f"Invalid date: {value!r}", raw=value)
