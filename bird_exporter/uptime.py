"""Tolerant number parsing and uptime calculation for bird output."""

from __future__ import annotations

import logging
import math
import re
from datetime import datetime, timedelta, timezone

log = logging.getLogger(__name__)

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_MAX_DURATION_SECONDS = _INT64_MAX // 1_000_000_000

_INT_RE = re.compile(r"[+-]?[0-9]+")
_UPTIME_RE = re.compile(
    r"(?:((\d+):(\d{2}):(\d{2}))|(\d+)|(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}))",
    re.ASCII,
)
_ISO_FORMAT = "%Y-%m-%d %H:%M:%S"
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MICROSECOND = timedelta(microseconds=1)


def parse_int(value: str) -> int:
    """Parse a base-10 64-bit integer; log and return 0 when it is not one."""
    if not _INT_RE.fullmatch(value):
        log.error("invalid integer: %r", value)
        return 0
    result = int(value)
    if not _INT64_MIN <= result <= _INT64_MAX:
        log.error("integer out of range: %r", value)
        return 0
    return result


def parse_float(value: str) -> float:
    """Parse a float; log and return 0.0 when it is not one."""
    if not value or "_" in value or value != value.strip():
        log.error("invalid float: %r", value)
        return 0.0
    try:
        result = float(value)
    except ValueError:
        log.error("invalid float: %r", value)
        return 0.0
    if math.isinf(result) and value.lstrip("+-").lower() not in ("inf", "infinity"):
        log.error("float out of range: %r", value)
        return 0.0
    return result


def _aware(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now().astimezone()
    if now.tzinfo is None:
        return now.astimezone()
    return now


def _truncate_to_seconds(microseconds: int) -> int:
    whole = abs(microseconds) // 1_000_000
    return whole if microseconds >= 0 else -whole


def _uptime_for_duration(hours: str, minutes: str, seconds: str) -> int:
    total = parse_int(hours) * 3600 + parse_int(minutes) * 60 + parse_int(seconds)
    if total > _MAX_DURATION_SECONDS:
        log.error("duration out of range: %s:%s:%s", hours, minutes, seconds)
        return 0
    return total


def _uptime_for_timestamp(value: str, now: datetime) -> int:
    since = parse_int(value)
    elapsed = (now - _EPOCH) // _MICROSECOND - since * 1_000_000
    return _truncate_to_seconds(elapsed)


def _uptime_for_iso(value: str, now: datetime) -> int:
    try:
        start = datetime.strptime(value, _ISO_FORMAT).astimezone()
    except (ValueError, OverflowError, OSError) as exc:
        log.error("invalid timestamp %r: %s", value, exc)
        return 0
    return _truncate_to_seconds((now - start) // _MICROSECOND)


def parse_uptime(value: str, now: datetime | None = None) -> int:
    """Return the uptime in seconds described by bird's "since" column.

    Accepts ``h:mm:ss`` durations, unix timestamps and ``YYYY-MM-DD hh:mm:ss``
    local times; anything else yields 0. ``now`` defaults to the current time,
    a naive ``now`` is taken as local time.
    """
    match = _UPTIME_RE.fullmatch(value)
    if match is None:
        return 0
    if match.group(1):
        return _uptime_for_duration(match.group(2), match.group(3), match.group(4))
    if match.group(5):
        return _uptime_for_timestamp(value, _aware(now))
    return _uptime_for_iso(value, _aware(now))