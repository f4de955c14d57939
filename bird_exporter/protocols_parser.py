"""Parser for the output of bird's ``show protocols all`` command."""

from __future__ import annotations

import re
from collections.abc import Iterator
from datetime import datetime

from .protocol import Proto, Protocol, RouteChangeCount
from .uptime import parse_int, parse_uptime

_INT64_MAX = 2**63 - 1

_PROTOCOL_RE = re.compile(
    r"^(?:1002-)?(\S+)\s+"
    r"(MRT|BGP|BFD|OSPF|RPKI|RIP|RAdv|Pipe|Perf|Direct|Babel|Device|Kernel|Static)\s+"
    r"(\S+)\s+(\S+)\s+(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}|\S+)(?:\s+(.*?))?$",
    re.ASCII,
)
_DESCRIPTION_RE = re.compile(r"Description:\s+(.*)", re.ASCII)
_ROUTE_RE = re.compile(
    r"\s+Routes:\s+(\d+) imported, (?:(\d+) filtered, )?(\d+) exported(?:, (\d+) preferred)?",
    re.ASCII,
)
_ROUTE_CHANGE_RE = re.compile(
    r"(Import|Export) (updates|withdraws):\s+(\d+|---)\s+(\d+|---)\s+(\d+|---)"
    r"\s+(\d+|---)\s+(\d+|---)\s*",
    re.ASCII,
)
_FILTER_RE = re.compile(r"(Input|Output) filter:\s+(.*)", re.ASCII)
_CHANNEL_RE = re.compile(r"Channel ipv(4|6)")

_PROTO_BY_NAME = {
    "BGP": Proto.BGP,
    "OSPF": Proto.OSPF,
    "Direct": Proto.DIRECT,
    "Kernel": Proto.KERNEL,
    "Static": Proto.STATIC,
    "Babel": Proto.BABEL,
    "RPKI": Proto.RPKI,
    "BFD": Proto.BFD,
}


def parse_proto(value: str) -> Proto:
    """Map bird's protocol type name to a Proto, UNKNOWN for unsupported types."""
    return _PROTO_BY_NAME.get(value, Proto.UNKNOWN)


def _lines(data: bytes | str) -> Iterator[str]:
    text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data
    if not text:
        return
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    for line in lines:
        yield line[:-1] if line.endswith("\r") else line


def _count(value: str) -> int:
    return min(int(value), _INT64_MAX)


def _route_change_value(value: str) -> int:
    return 0 if value == "---" else parse_int(value)


class _ProtocolsParser:
    def __init__(self, ip_version: str, now: datetime | None) -> None:
        self.ip_version = ip_version
        self.now = now
        self.current: Protocol | None = None
        self.protocols: list[Protocol] = []
        self.handlers = (
            self._empty_line,
            self._protocol_line,
            self._description_line,
            self._channel_line,
            self._routes_line,
            self._route_changes_line,
            self._filter_line,
        )

    def feed(self, line: str) -> None:
        for handler in self.handlers:
            if handler(line):
                return

    def _empty_line(self, line: str) -> bool:
        if line:
            return False
        self.current = None
        return True

    def _protocol_line(self, line: str) -> bool:
        match = _PROTOCOL_RE.match(line)
        if match is None:
            return False
        self.current = Protocol(
            name=match.group(1),
            proto=parse_proto(match.group(2)),
            ip_version=self.ip_version,
            uptime=parse_uptime(match.group(5), self.now),
            up=1 if match.group(4) == "up" else 0,
            state=match.group(6) or "",
        )
        self.protocols.append(self.current)
        return True

    def _description_line(self, line: str) -> bool:
        match = _DESCRIPTION_RE.search(line)
        if match is not None and self.current is not None:
            self.current.description = match.group(1)
        return False

    def _channel_line(self, line: str) -> bool:
        if self.ip_version or self.current is None:
            return False
        match = _CHANNEL_RE.search(line)
        if match is None:
            return False
        if not self.current.ip_version:
            self.current.ip_version = match.group(1)
        else:
            previous = self.current
            self.current = Protocol(
                name=previous.name,
                proto=previous.proto,
                up=previous.up,
                uptime=previous.uptime,
                ip_version=match.group(1),
            )
            self.protocols.append(self.current)
        return True

    def _routes_line(self, line: str) -> bool:
        if self.current is None:
            return False
        match = _ROUTE_RE.match(line)
        if match is None:
            return False
        imported, filtered, exported, preferred = match.groups()
        self.current.imported = _count(imported)
        self.current.exported = _count(exported)
        if filtered:
            self.current.filtered = _count(filtered)
        if preferred:
            self.current.preferred = _count(preferred)
        return True

    def _route_changes_line(self, line: str) -> bool:
        if self.current is None:
            return False
        match = _ROUTE_CHANGE_RE.search(line)
        if match is None:
            return False
        direction, kind = match.group(1), match.group(2)
        received, rejected, filtered, ignored, accepted = (
            _route_change_value(v) for v in match.group(3, 4, 5, 6, 7)
        )
        counts = RouteChangeCount(received, rejected, filtered, ignored, accepted)
        if direction == "Import":
            if kind == "updates":
                self.current.import_updates = counts
            else:
                self.current.import_withdraws = counts
        elif kind == "updates":
            self.current.export_updates = counts
        else:
            self.current.export_withdraws = counts
        return True

    def _filter_line(self, line: str) -> bool:
        if self.current is None:
            return False
        match = _FILTER_RE.search(line)
        if match is None:
            return False
        if match.group(1) == "Input":
            self.current.import_filter = match.group(2)
        else:
            self.current.export_filter = match.group(2)
        return True


def parse_protocols(
    data: bytes | str, ip_version: str, now: datetime | None = None
) -> list[Protocol]:
    """Parse ``show protocols all`` output into protocols.

    With an empty ``ip_version`` (bird 2 multi-channel output) each channel
    of a protocol becomes its own entry carrying the channel's IP version.
    """
    parser = _ProtocolsParser(ip_version, now)
    for line in _lines(data):
        parser.feed(line.rstrip(" "))
    return parser.protocols