#!/usr/bin/env python3
"""
C# DateTime Ticks
=================

Blueprint envelopes store their creation time as .NET DateTime ticks:
100-nanosecond intervals since 0001-01-01T00:00:00. Python datetimes only
resolve microseconds, so the last tick digit is truncated on conversion.
"""

from datetime import datetime, timedelta, timezone

CSHARP_EPOCH = datetime(1, 1, 1)
TICKS_PER_SECOND = 10_000_000
TICKS_PER_MICROSECOND = 10


def csharp_to_datetime(ticks: int) -> datetime:
    seconds, remainder = divmod(ticks, TICKS_PER_SECOND)
    return CSHARP_EPOCH + timedelta(seconds=seconds,
                                    microseconds=remainder // TICKS_PER_MICROSECOND)


def datetime_to_csharp(value: datetime) -> int:
    delta = value - CSHARP_EPOCH
    return ((delta.days * 86400 + delta.seconds) * TICKS_PER_SECOND
            + delta.microseconds * TICKS_PER_MICROSECOND)


def csharp_now() -> int:
    """Current UTC time as ticks."""
    return datetime_to_csharp(datetime.now(timezone.utc).replace(tzinfo=None))
