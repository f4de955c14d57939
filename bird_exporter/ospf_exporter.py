"""Exporter for OSPF state and per-area counters."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol as _Interface

from .birdsocket import BirdSocketError
from .exposition import Metric, MetricDesc, MetricExporter
from .protocol import OSPFArea, Protocol

log = logging.getLogger(__name__)


class _OSPFSource(_Interface):
    def get_ospf_areas(self, protocol: Protocol) -> list[OSPFArea]: ...


@dataclass(frozen=True)
class _OSPFDescs:
    running: MetricDesc
    interface_count: MetricDesc
    neighbor_count: MetricDesc
    neighbor_adjacent_count: MetricDesc

    @classmethod
    def for_prefix(cls, prefix: str) -> _OSPFDescs:
        area_labels = ("name", "area")
        return cls(
            running=MetricDesc(
                prefix + "_running",
                "State of OSPF: 0 = Alone, 1 = Running (Neighbor-Adjacencies established)",
                ("name",),
            ),
            interface_count=MetricDesc(
                prefix + "_interface_count", "Number of interfaces in the area", area_labels
            ),
            neighbor_count=MetricDesc(
                prefix + "_neighbor_count", "Number of neighbors in the area", area_labels
            ),
            neighbor_adjacent_count=MetricDesc(
                prefix + "_neighbor_adjacent_count",
                "Number of adjacent neighbors in the area",
                area_labels,
            ),
        )

    def all(self) -> list[MetricDesc]:
        return [self.running, self.interface_count, self.neighbor_count, self.neighbor_adjacent_count]


class OSPFExporter(MetricExporter):
    """Exports whether OSPF is running and the counters of each of its areas."""

    def __init__(self, prefix: str, client: _OSPFSource) -> None:
        self.client = client
        self.descriptions = {
            "4": _OSPFDescs.for_prefix(prefix + "ospf"),
            "6": _OSPFDescs.for_prefix(prefix + "ospfv3"),
        }

    def describe(self) -> list[MetricDesc]:
        return self.descriptions["4"].all() + self.descriptions["6"].all()

    def export(self, protocol: Protocol, new_format: bool) -> list[Metric]:
        try:
            descs = self.descriptions[protocol.ip_version]
        except KeyError:
            raise ValueError(
                f"OSPF protocol {protocol.name!r} has unsupported IP version {protocol.ip_version!r}"
            ) from None

        running = 1.0 if protocol.state == "Running" else 0.0
        metrics = [descs.running.gauge(running, protocol.name)]

        try:
            areas = self.client.get_ospf_areas(protocol)
        except BirdSocketError as exc:
            log.error("%s", exc)
            return metrics

        for area in areas:
            labels = (protocol.name, area.name)
            metrics.append(descs.interface_count.gauge(area.interface_count, *labels))
            metrics.append(descs.neighbor_count.gauge(area.neighbor_count, *labels))
            metrics.append(
                descs.neighbor_adjacent_count.gauge(area.neighbor_adjacent_count, *labels)
            )
        return metrics