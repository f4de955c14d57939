"""Data model for protocols, sessions, areas and prefix statistics reported by bird."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class Proto(enum.IntFlag):
    """Protocol kinds known to the exporter; values combine into a bit mask."""

    UNKNOWN = 0
    BGP = 1
    OSPF = 2
    KERNEL = 4
    STATIC = 8
    DIRECT = 16
    BABEL = 32
    RPKI = 64
    BFD = 128


@dataclass
class RouteChangeCount:
    """Counters of one row of bird's route change statistics."""

    received: int = 0
    rejected: int = 0
    filtered: int = 0
    ignored: int = 0
    accepted: int = 0


@dataclass
class Protocol:
    """A protocol instance (or one channel of it) as reported by bird."""

    name: str
    proto: Proto = Proto.UNKNOWN
    ip_version: str = ""
    uptime: int = 0
    description: str = ""
    import_filter: str = ""
    export_filter: str = ""
    up: int = 0
    state: str = ""
    imported: int = 0
    exported: int = 0
    filtered: int = 0
    preferred: int = 0
    import_updates: RouteChangeCount = field(default_factory=RouteChangeCount)
    import_withdraws: RouteChangeCount = field(default_factory=RouteChangeCount)
    export_updates: RouteChangeCount = field(default_factory=RouteChangeCount)
    export_withdraws: RouteChangeCount = field(default_factory=RouteChangeCount)


@dataclass
class Route:
    """A single route entry from bird."""

    network: str = ""
    prefix_len: int = 0
    next_hop: str = ""
    protocol: str = ""
    metric: int = 0
    origin: str = ""


@dataclass
class PrefixStats:
    """Number of routes per prefix length."""

    ip_version: str
    protocol: str
    prefix_length_counts: dict[int, int] = field(default_factory=dict)

    def add_route(self, prefix_len: int) -> None:
        """Count one more route with the given prefix length."""
        self.prefix_length_counts[prefix_len] = self.prefix_length_counts.get(prefix_len, 0) + 1

    def total(self) -> int:
        """Number of routes over all prefix lengths."""
        return sum(self.prefix_length_counts.values())


@dataclass
class BFDSession:
    """A BFD session of a BFD protocol instance."""

    protocol_name: str = ""
    ip: str = ""
    interface: str = ""
    up: bool = False
    since: int = 0
    since_epoch: int = 0
    interval: float = 0.0
    timeout: float = 0.0


@dataclass
class OSPFArea:
    """Counters of one OSPF area."""

    name: str
    interface_count: int = 0
    neighbor_count: int = 0
    neighbor_adjacent_count: int = 0