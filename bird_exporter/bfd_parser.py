"""Parser for the output of bird's ``show bfd sessions`` command."""

from __future__ import annotations

import re
from collections.abc import Iterator
from datetime import datetime

from .protocol import BFDSession
from .uptime import parse_float, parse_int, parse_uptime

_SESSION_RE = re.compile(
    r"(\S+)\s+(\S+)\s+(Up|Down|Init)\s+"
    r"(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}|\S+)\s+(\d+)?\s+([0-9.]+)\s+([0-9.]+)",
    re.ASCII,
)


def _stripped_lines(data: bytes | str) -> Iterator[str]:
    text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data
    for line in text.split("\n"):
        yield line.strip()


def _parse_session(protocol_name: str, line: str, now: datetime | None) -> BFDSession | None:
    match = _SESSION_RE.fullmatch(line)
    if match is None:
        return None
    ip, interface, state, since, epoch, interval, timeout = match.groups()
    return BFDSession(
        protocol_name=protocol_name,
        ip=ip,
        interface=interface,
        up=state == "Up",
        since=parse_uptime(since, now),
        since_epoch=parse_int(epoch) if epoch else 0,
        interval=parse_float(interval),
        timeout=parse_float(timeout),
    )


def parse_bfd_sessions(
    protocol_name: str, data: bytes | str, now: datetime | None = None
) -> list[BFDSession]:
    """Parse the sessions listed by ``show bfd sessions`` for one protocol."""
    sessions = (_parse_session(protocol_name, line, now) for line in _stripped_lines(data))
    return [session for session in sessions if session is not None]