"""Collection of all metrics of one scrape."""

from __future__ import annotations

import logging
from typing import Protocol as _Interface

from .bfd_exporter import BFDExporter
from .birdsocket import BirdSocketError
from .exposition import Metric, MetricDesc, MetricExporter
from .generic_exporter import GenericProtocolMetricExporter, LegacyMetricExporter
from .labels import DefaultLabelStrategy, LegacyLabelStrategy
from .ospf_exporter import OSPFExporter
from .prefix_exporter import PrefixSizeExporter, TablePrefixSizeExporter
from .protocol import BFDSession, OSPFArea, PrefixStats, Proto, Protocol

log = logging.getLogger(__name__)

_DEFAULT_DESCRIPTION_LABELS_REGEX = r"(\w+)=(\w+)"

_SOCKET_QUERY_DESC = MetricDesc(
    "bird_socket_query_success",
    "Result of querying bird socket: 0 = failed, 1 = suceeded",
)

_PREFIX_SIZE_PROTOCOLS = (
    Proto.BGP,
    Proto.OSPF,
    Proto.KERNEL,
    Proto.STATIC,
    Proto.DIRECT,
    Proto.BABEL,
)

Exporters = dict[Proto, list[MetricExporter]]


class _Client(_Interface):
    def get_protocols(self) -> list[Protocol]: ...

    def get_ospf_areas(self, protocol: Protocol) -> list[OSPFArea]: ...

    def get_bfd_sessions(self, protocol: Protocol) -> list[BFDSession]: ...

    def get_prefix_stats(self, protocol: Protocol) -> PrefixStats: ...

    def get_all_prefix_stats(self, ip_version: str) -> PrefixStats: ...


def _add_prefix_exporters(
    exporters: Exporters, client: _Client, prefix_size: bool, table_prefix_size: bool
) -> Exporters:
    if prefix_size:
        prefix_exporter = PrefixSizeExporter("bird", client)
        for proto in _PREFIX_SIZE_PROTOCOLS:
            exporters[proto].append(prefix_exporter)
    if table_prefix_size:
        # The table-wide counts only need one trigger per IP version; BGP is the likeliest to exist.
        exporters[Proto.BGP].append(TablePrefixSizeExporter("bird", client))
    return exporters


def exporters_for_legacy(
    client: _Client, prefix_size: bool = False, table_prefix_size: bool = False
) -> Exporters:
    """Exporters per protocol kind for the old metric format."""
    labels = LegacyLabelStrategy()
    exporters: Exporters = {
        Proto.BGP: [LegacyMetricExporter("bgp4_session", "bgp6_session", labels)],
        Proto.DIRECT: [LegacyMetricExporter("direct4", "direct6", labels)],
        Proto.KERNEL: [LegacyMetricExporter("kernel4", "kernel6", labels)],
        Proto.OSPF: [LegacyMetricExporter("ospf", "ospfv3", labels), OSPFExporter("", client)],
        Proto.STATIC: [LegacyMetricExporter("static4", "static6", labels)],
        Proto.BABEL: [LegacyMetricExporter("babel4", "babel6", labels)],
        Proto.RPKI: [LegacyMetricExporter("rpki4", "rpki6", labels)],
        Proto.BFD: [BFDExporter(client)],
    }
    return _add_prefix_exporters(exporters, client, prefix_size, table_prefix_size)


def exporters_for_default(
    client: _Client,
    description_labels: bool = False,
    description_labels_regex: str = _DEFAULT_DESCRIPTION_LABELS_REGEX,
    prefix_size: bool = False,
    table_prefix_size: bool = False,
) -> Exporters:
    """Exporters per protocol kind for the current metric format."""
    labels = DefaultLabelStrategy(description_labels, description_labels_regex)
    generic = GenericProtocolMetricExporter("bird_protocol", labels)
    exporters: Exporters = {
        Proto.BGP: [generic],
        Proto.DIRECT: [generic],
        Proto.KERNEL: [generic],
        Proto.OSPF: [generic, OSPFExporter("bird_", client)],
        Proto.STATIC: [generic],
        Proto.BABEL: [generic],
        Proto.RPKI: [generic],
        Proto.BFD: [BFDExporter(client)],
    }
    return _add_prefix_exporters(exporters, client, prefix_size, table_prefix_size)


class MetricCollector:
    """Queries bird once and runs the exporters of every enabled protocol."""

    def __init__(
        self,
        client: _Client,
        enabled_protocols: Proto,
        new_format: bool = True,
        description_labels: bool = False,
        description_labels_regex: str = _DEFAULT_DESCRIPTION_LABELS_REGEX,
        prefix_size: bool = False,
        table_prefix_size: bool = False,
    ) -> None:
        self.client = client
        self.enabled_protocols = enabled_protocols
        self.new_format = new_format
        if new_format:
            self.exporters = exporters_for_default(
                client, description_labels, description_labels_regex, prefix_size, table_prefix_size
            )
        else:
            self.exporters = exporters_for_legacy(client, prefix_size, table_prefix_size)

    def describe(self) -> list[MetricDesc]:
        """All descriptors known up front, each listed once."""
        descs = [_SOCKET_QUERY_DESC]
        seen = {_SOCKET_QUERY_DESC}
        for exporters in self.exporters.values():
            for exporter in exporters:
                for desc in exporter.describe():
                    if desc not in seen:
                        seen.add(desc)
                        descs.append(desc)
        return descs

    def _is_enabled(self, protocol: Protocol) -> bool:
        if protocol.proto == Proto.UNKNOWN:
            return False
        return (self.enabled_protocols & protocol.proto) == protocol.proto

    def collect(self) -> list[Metric]:
        """Metrics of one scrape, the socket query result first."""
        try:
            protocols = self.client.get_protocols()
        except BirdSocketError as exc:
            log.error("%s", exc)
            return [_SOCKET_QUERY_DESC.gauge(0)]

        metrics = [_SOCKET_QUERY_DESC.gauge(1)]
        for protocol in protocols:
            if not self._is_enabled(protocol):
                continue
            for exporter in self.exporters.get(protocol.proto, []):
                metrics.extend(exporter.export(protocol, self.new_format))
        return metrics