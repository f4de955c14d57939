"""Exporters for route counts by prefix length."""

from __future__ import annotations

import logging
from typing import Protocol as _Interface

from .birdsocket import BirdSocketError
from .exposition import Metric, MetricDesc, MetricExporter
from .protocol import PrefixStats, Proto, Protocol

log = logging.getLogger(__name__)

_TYPE_NAMES = {
    Proto.BGP: "BGP",
    Proto.OSPF: "OSPF",
    Proto.DIRECT: "Direct",
    Proto.KERNEL: "Kernel",
    Proto.STATIC: "Static",
    Proto.BABEL: "Babel",
    Proto.RPKI: "RPKI",
    Proto.BFD: "BFD",
}


class _PrefixSource(_Interface):
    def get_prefix_stats(self, protocol: Protocol) -> PrefixStats: ...

    def get_all_prefix_stats(self, ip_version: str) -> PrefixStats: ...


def protocol_type_name(proto: Proto) -> str:
    """Display name of a protocol kind, ``Unknown`` for anything else."""
    return _TYPE_NAMES.get(proto, "Unknown")


class PrefixSizeExporter(MetricExporter):
    """Exports how many routes of a protocol have each prefix length."""

    def __init__(self, prefix: str, client: _PrefixSource) -> None:
        self.prefix = prefix
        self.client = client

    def describe(self) -> list[MetricDesc]:
        return []

    def export(self, protocol: Protocol, new_format: bool) -> list[Metric]:
        try:
            stats = self.client.get_prefix_stats(protocol)
        except BirdSocketError as exc:
            log.error("Failed to get prefix statistics for protocol %s: %s", protocol.name, exc)
            return []

        suffix = "_prefix_length_count" if new_format else "_prefix_count_by_length"
        desc = MetricDesc(
            self.prefix + suffix,
            "Number of prefixes by prefix length",
            ("name", "proto", "ip_version", "prefix_length"),
        )
        type_name = protocol_type_name(protocol.proto)
        return [
            desc.gauge(count, protocol.name, type_name, protocol.ip_version, str(length))
            for length, count in sorted(stats.prefix_length_counts.items())
        ]


class TablePrefixSizeExporter(MetricExporter):
    """Exports how many routes of the whole master table have each prefix length."""

    def __init__(self, prefix: str, client: _PrefixSource) -> None:
        self.prefix = prefix
        self.client = client

    def describe(self) -> list[MetricDesc]:
        return []

    def export(self, protocol: Protocol, new_format: bool) -> list[Metric]:
        try:
            stats = self.client.get_all_prefix_stats(protocol.ip_version)
        except BirdSocketError as exc:
            log.error(
                "Failed to get table-wide prefix statistics for IP version %s: %s",
                protocol.ip_version,
                exc,
            )
            return []

        suffix = "_table_prefix_length_count" if new_format else "_table_prefix_count_by_length"
        desc = MetricDesc(
            self.prefix + suffix,
            "Number of unique prefixes by prefix length in routing table",
            ("ip_version", "prefix_length", "table"),
        )
        table = "master6" if protocol.ip_version == "6" else "master4"
        return [
            desc.gauge(count, protocol.ip_version, str(length), table)
            for length, count in sorted(stats.prefix_length_counts.items())
        ]