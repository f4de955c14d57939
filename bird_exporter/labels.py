"""Label sets attached to per-protocol metrics."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod

from .protocol import Proto, Protocol

_PROTO_NAMES = {
    Proto.BGP: "BGP",
    Proto.STATIC: "Static",
    Proto.KERNEL: "Kernel",
    Proto.DIRECT: "Direct",
    Proto.BABEL: "Babel",
    Proto.RPKI: "RPKI",
    Proto.BFD: "BFD",
}


def proto_string(protocol: Protocol) -> str:
    """Display name of a protocol's kind; OSPF on IPv6 is OSPFv3, unknown is empty."""
    if protocol.proto == Proto.OSPF:
        return "OSPF" if protocol.ip_version == "4" else "OSPFv3"
    return _PROTO_NAMES.get(protocol.proto, "")


class LabelStrategy(ABC):
    """Decides the label names of protocol metrics and where their values come from."""

    @abstractmethod
    def label_names(self, protocol: Protocol) -> list[str]:
        """Label names for the protocol's metrics."""

    @abstractmethod
    def label_values(self, protocol: Protocol) -> list[str]:
        """Values matching ``label_names``."""


class DefaultLabelStrategy(LabelStrategy):
    """Name, kind, IP version and filters, plus optional labels from the description."""

    def __init__(
        self, description_labels: bool = False, description_labels_regex: str = r"(\w+)=(\w+)"
    ) -> None:
        self.description_labels = description_labels
        self.description_labels_regex = re.compile(description_labels_regex, re.ASCII)
        if description_labels and self.description_labels_regex.groups < 2:
            raise ValueError("description label regex needs a key group and a value group")

    def _from_description(self, protocol: Protocol, group: int) -> list[str]:
        if not self.description_labels or not protocol.description:
            return []
        return [
            (match.group(group) or "").strip()
            for match in self.description_labels_regex.finditer(protocol.description)
        ]

    def label_names(self, protocol: Protocol) -> list[str]:
        return [
            "name",
            "proto",
            "ip_version",
            "import_filter",
            "export_filter",
            *self._from_description(protocol, 1),
        ]

    def label_values(self, protocol: Protocol) -> list[str]:
        return [
            protocol.name,
            proto_string(protocol),
            protocol.ip_version,
            protocol.import_filter,
            protocol.export_filter,
            *self._from_description(protocol, 2),
        ]


class LegacyLabelStrategy(LabelStrategy):
    """Only the protocol name."""

    def label_names(self, protocol: Protocol) -> list[str]:
        return ["name"]

    def label_values(self, protocol: Protocol) -> list[str]:
        return [protocol.name]