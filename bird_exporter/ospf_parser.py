"""Parser for the output of bird's ``show ospf`` command."""

from __future__ import annotations

import re
from collections.abc import Iterator

from .protocol import OSPFArea
from .uptime import parse_int

_AREA_RE = re.compile(r"Area: \S+ \((\S+)\)", re.ASCII)
_COUNTER_RE = re.compile(r"Number of ([^:]+):\s*(\d+)", re.ASCII)


def _lines(data: bytes | str) -> Iterator[str]:
    text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data
    for line in text.split("\n"):
        if line.endswith("\r"):
            line = line[:-1]
        yield line.strip(" ")


def parse_ospf(data: bytes | str) -> list[OSPFArea]:
    """Parse the areas and their interface and neighbor counters."""
    areas: list[OSPFArea] = []
    current: OSPFArea | None = None

    for line in _lines(data):
        area = _AREA_RE.search(line)
        if area is not None:
            current = OSPFArea(name=area.group(1))
            areas.append(current)

        if current is None:
            continue
        counter = _COUNTER_RE.search(line)
        if counter is None:
            continue
        name, value = counter.group(1), parse_int(counter.group(2))
        if name == "interfaces":
            current.interface_count = value
        elif name == "neighbors":
            current.neighbor_count = value
        elif name == "adjacent neighbors":
            current.neighbor_adjacent_count = value

    return areas