"""Parser turning bird route listings into prefix length statistics."""

from __future__ import annotations

import re
from collections.abc import Iterator

from .protocol import PrefixStats

_INT64_MAX = 2**63 - 1

_ROUTE_LINE_RE = re.compile(
    r"^([0-9a-fA-F:./]+)(?:/(\d+))?\s+via\s+([0-9a-fA-F:.]+)\s+on\s+\S+\s+"
    r"\[(\S+)\s+[^\]]+\]\s*[*]?\s*\((\d+)\)",
    re.ASCII,
)
_PREFIX_RE = re.compile(r"(?:^|\s)([0-9a-fA-F:.]+)/(\d+)(?:\s|$)", re.ASCII)


def _to_int(value: str | None) -> int | None:
    if not value:
        return None
    number = int(value)
    return number if number <= _INT64_MAX else None


def extract_prefix_length(line: str) -> int:
    """Return the prefix length of the route on ``line``, 0 if there is none."""
    match = _ROUTE_LINE_RE.search(line)
    if match is not None:
        length = _to_int(match.group(2))
        if length is not None:
            return length

    match = _PREFIX_RE.search(line)
    if match is not None:
        length = _to_int(match.group(2))
        if length is not None:
            return length

    return 0


def _is_noise(line: str) -> bool:
    return (
        line.startswith("BIRD")
        or line.startswith("Access restricted")
        or "Table" in line
        or "Preference" in line
    )


def _lines(data: bytes | str) -> Iterator[str]:
    text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data
    for line in text.split("\n"):
        yield line.strip()


def parse_prefix_stats(protocol_name: str, ip_version: str, data: bytes | str) -> PrefixStats:
    """Count the routes of a bird route listing by prefix length."""
    stats = PrefixStats(ip_version=ip_version, protocol=protocol_name)
    for line in _lines(data):
        if not line or _is_noise(line):
            continue
        length = extract_prefix_length(line)
        if length > 0:
            stats.add_route(length)
    return stats