"""Exporters for the counters every protocol reports."""

from __future__ import annotations

from .exposition import Metric, MetricDesc, MetricExporter
from .labels import LabelStrategy
from .protocol import Protocol, RouteChangeCount

# (attribute of Protocol, metric infix, subject in help text, help of the "receive" counter)
_CHANGE_COUNTERS = (
    ("import_updates", "update_import", "incoming updates", "Number of received updates"),
    ("export_updates", "update_export", "outgoing updates", "Number of sent updates"),
    ("import_withdraws", "withdraw_import", "incoming withdraws", "Number of received withdraws"),
    ("export_withdraws", "withdraw_export", "outgoing withdraws", "Number of outgoing withdraws"),
)

# (metric action, RouteChangeCount attribute)
_ACTIONS = (
    ("receive", "received"),
    ("reject", "rejected"),
    ("filter", "filtered"),
    ("accept", "accepted"),
    ("ignore", "ignored"),
)


class GenericProtocolMetricExporter(MetricExporter):
    """Exports state, route counts, uptime and route change statistics of a protocol."""

    def __init__(self, prefix: str, label_strategy: LabelStrategy) -> None:
        self.prefix = prefix
        self.label_strategy = label_strategy

    def describe(self) -> list[MetricDesc]:
        return []

    def export(self, protocol: Protocol, new_format: bool) -> list[Metric]:
        labels = tuple(self.label_strategy.label_names(protocol))
        values = tuple(self.label_strategy.label_values(protocol))
        p = self.prefix

        def desc(suffix: str, help_text: str) -> MetricDesc:
            return MetricDesc(f"{p}_{suffix}", help_text, labels)

        if new_format:
            count_names = ("prefix_import_count", "prefix_export_count",
                           "prefix_filter_count", "prefix_preferred_count")
        else:
            count_names = ("prefix_count_import", "prefix_count_export",
                           "prefix_count_filter", "prefix_count_preferred")
        count_helps = ("Number of imported routes", "Number of exported routes",
                       "Number of filtered routes", "Number of preferred routes")
        counts = (protocol.imported, protocol.exported, protocol.filtered, protocol.preferred)

        up = MetricDesc(f"{p}_up", "Protocol is up", labels + ("state",))
        metrics = [up.gauge(protocol.up, *values, protocol.state)]
        metrics.extend(
            desc(name, help_text).gauge(count, *values)
            for name, help_text, count in zip(count_names, count_helps, counts)
        )
        metrics.append(
            desc("uptime", "Uptime of the protocol in seconds").gauge(protocol.uptime, *values)
        )

        for attribute, infix, subject, receive_help in _CHANGE_COUNTERS:
            changes: RouteChangeCount = getattr(protocol, attribute)
            for action, field_name in _ACTIONS:
                help_text = (
                    receive_help if action == "receive"
                    else f"Number of {subject} being {field_name}"
                )
                metrics.append(
                    desc(f"changes_{infix}_{action}_count", help_text).gauge(
                        getattr(changes, field_name), *values
                    )
                )
        return metrics


class LegacyMetricExporter(MetricExporter):
    """Old-style exporter with separate metric prefixes for IPv4 and IPv6."""

    def __init__(self, prefix_ipv4: str, prefix_ipv6: str, label_strategy: LabelStrategy) -> None:
        self.ipv4_exporter = GenericProtocolMetricExporter(prefix_ipv4, label_strategy)
        self.ipv6_exporter = GenericProtocolMetricExporter(prefix_ipv6, label_strategy)

    def describe(self) -> list[MetricDesc]:
        return self.ipv4_exporter.describe() + self.ipv6_exporter.describe()

    def export(self, protocol: Protocol, new_format: bool) -> list[Metric]:
        exporter = self.ipv4_exporter if protocol.ip_version == "4" else self.ipv6_exporter
        return exporter.export(protocol, False)