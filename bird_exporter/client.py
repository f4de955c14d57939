"""Retrieval of protocol information and statistics from bird."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from . import birdsocket
from .bfd_parser import parse_bfd_sessions
from .birdsocket import BirdSocketError
from .ospf_parser import parse_ospf
from .protocol import BFDSession, OSPFArea, PrefixStats, Proto, Protocol
from .protocols_parser import parse_protocols
from .route_parser import parse_prefix_stats

_INT64_MAX = 2**63 - 1

_COUNT_V2_RE = re.compile(
    r"^(\d+)-(\d+)\s+of\s+\d+\s+routes\s+for\s+\d+\s+networks\s+in\s+table", re.ASCII
)
_COUNT_RE = re.compile(r"^(\d+)\s+routes?", re.ASCII)

_IPV6_PREFIX_LENGTHS = (
    3, 16, 19, 20, 21, 22, 23, 24, 25, 26, 27, 28, 29, 30, 31, 32, 33, 34, 35, 36,
    37, 38, 39, 40, 41, 42, 43, 44, 45, 46, 47, 48, 52, 56, 60, 64, 96, 126, 127, 128,
)
_IPV4_PREFIX_LENGTHS = (8, 12, 16, 17, 18, 19, 20, 21, 22, 23, 24, 25, 26, 27, 28, 29, 30, 31, 32)

_ROUTE_SOURCES = {
    Proto.BGP: "BGP",
    Proto.OSPF: "OSPF",
    Proto.KERNEL: "KERNEL",
    Proto.STATIC: "STATIC",
    Proto.DIRECT: "DIRECT",
    Proto.BABEL: "BABEL",
}

Query = Callable[[str, str], bytes]


@dataclass
class BirdClientOptions:
    """How to reach bird: one socket for bird 2, or separate IPv4/IPv6 daemons."""

    bird_v2: bool = False
    bird_enabled: bool = True
    bird6_enabled: bool = True
    bird_socket: str = "/var/run/bird.ctl"
    bird6_socket: str = "/var/run/bird6.ctl"


def parse_route_count(data: bytes | str) -> int:
    """Extract the route count from the output of a bird ``count`` query."""
    text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data
    for raw in text.split("\n"):
        line = raw.strip()
        for regex, group in ((_COUNT_V2_RE, 2), (_COUNT_RE, 1)):
            match = regex.search(line)
            if match is not None:
                count = int(match.group(group))
                if count <= _INT64_MAX:
                    return count
    return 0


def route_source(proto: Proto) -> str:
    """Name of bird's route source (``RTS_*``) for a protocol kind; BGP by default."""
    return _ROUTE_SOURCES.get(proto, "BGP")


def _table_name(ip_version: str) -> str:
    return "master6" if ip_version == "6" else "master4"


class BirdClient:
    """Queries bird's control socket(s) and parses the replies."""

    def __init__(self, options: BirdClientOptions | None = None, query: Query = birdsocket.query) -> None:
        self.options = options if options is not None else BirdClientOptions()
        self._query = query

    def socket_for(self, ip_version: str) -> str:
        """Socket serving the given IP version."""
        if not self.options.bird_v2 and ip_version == "6":
            return self.options.bird6_socket
        return self.options.bird_socket

    def _ip_versions(self) -> list[str]:
        if self.options.bird_v2:
            return [""]
        versions = []
        if self.options.bird_enabled:
            versions.append("4")
        if self.options.bird6_enabled:
            versions.append("6")
        return versions

    def get_protocols(self) -> list[Protocol]:
        """Retrieve all protocols with their statistics."""
        protocols: list[Protocol] = []
        for ip_version in self._ip_versions():
            data = self._query(self.socket_for(ip_version), "show protocols all")
            protocols.extend(parse_protocols(data, ip_version))
        return protocols

    def get_ospf_areas(self, protocol: Protocol) -> list[OSPFArea]:
        """Retrieve the areas of an OSPF protocol."""
        data = self._query(self.socket_for(protocol.ip_version), f"show ospf {protocol.name}")
        return parse_ospf(data)

    def get_bfd_sessions(self, protocol: Protocol) -> list[BFDSession]:
        """Retrieve the sessions of a BFD protocol."""
        data = self._query(
            self.socket_for(protocol.ip_version), f"show bfd sessions {protocol.name}"
        )
        return parse_bfd_sessions(protocol.name, data)

    def get_prefix_stats(self, protocol: Protocol) -> PrefixStats:
        """Count the routes of one protocol by prefix length.

        Several commands are tried in turn; the first one yielding routes wins.
        """
        sock = self.socket_for(protocol.ip_version)
        name = protocol.name
        commands = (
            f"show route all protocol {name}",
            f"show route protocol {name} all",
            f"show route protocol {name}",
            f"show route table {_table_name(protocol.ip_version)} protocol {name} all",
            f"show route where source = RTS_{route_source(protocol.proto)}",
        )

        stats: PrefixStats | None = None
        last_error: BirdSocketError | None = None
        for command in commands:
            try:
                data = self._query(sock, command)
            except BirdSocketError as exc:
                last_error = exc
                continue
            stats = parse_prefix_stats(name, protocol.ip_version, data)
            if stats.total() > 0:
                return stats

        if stats is not None:
            return stats
        assert last_error is not None
        raise last_error

    def get_all_prefix_stats(self, ip_version: str) -> PrefixStats:
        """Count all routes of the master table of an IP version by prefix length."""
        sock = self.socket_for(ip_version)
        table = _table_name(ip_version)

        counted = self._count_based_prefix_stats(sock, table, ip_version)
        if counted.total() > 0:
            return counted

        try:
            return self._sampled_prefix_stats(sock, table, ip_version)
        except BirdSocketError as exc:
            raise BirdSocketError(
                f"unable to get prefix stats: counting found no routes, sampling failed ({exc})"
            ) from exc

    def _count_based_prefix_stats(self, sock: str, table: str, ip_version: str) -> PrefixStats:
        stats = PrefixStats(ip_version=ip_version, protocol="all_routes")
        if ip_version == "6":
            lengths, network = _IPV6_PREFIX_LENGTHS, "::/0"
        else:
            lengths, network = _IPV4_PREFIX_LENGTHS, "0.0.0.0/0"

        for length in lengths:
            command = f"show route table {table} where net ~ [{network}{{{length},{length}}}] primary count"
            try:
                data = self._query(sock, command)
            except BirdSocketError:
                continue
            count = parse_route_count(data)
            if count > 0:
                stats.prefix_length_counts[length] = count
        return stats

    def _sampled_prefix_stats(self, sock: str, table: str, ip_version: str) -> PrefixStats:
        stats = PrefixStats(ip_version=ip_version, protocol="all_routes")
        try:
            data = self._query(sock, f"show route table {table}")
        except BirdSocketError:
            data = self._query(sock, "show route")

        sample = parse_prefix_stats("sample", ip_version, data)

        try:
            total_data = self._query(sock, f"show route table {table} count")
        except BirdSocketError:
            return sample

        total = parse_route_count(total_data)
        sample_total = sample.total()
        if total > 0 and sample_total > 0:
            scale = total / sample_total
            stats.prefix_length_counts = {
                length: int(count * scale) for length, count in sample.prefix_length_counts.items()
            }
        return stats