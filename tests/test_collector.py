import functools
import operator

import pytest

from bird_exporter.birdsocket import BirdSocketError
from bird_exporter.collector import (
    MetricCollector,
    exporters_for_default,
    exporters_for_legacy,
)
from bird_exporter.exposition import format_metrics
from bird_exporter.prefix_exporter import PrefixSizeExporter, TablePrefixSizeExporter
from bird_exporter.protocol import BFDSession, OSPFArea, PrefixStats, Proto, Protocol

ALL = functools.reduce(operator.or_, Proto)


class FakeClient:
    def __init__(
        self,
        protocols=(),
        error=None,
        areas=(),
        sessions=(),
        prefix_stats=None,
        table_stats=None,
    ):
        self.protocols = list(protocols)
        self.error = error
        self.areas = list(areas)
        self.sessions = list(sessions)
        self.prefix_stats = prefix_stats
        self.table_stats = table_stats

    def get_protocols(self):
        if self.error is not None:
            raise self.error
        return self.protocols

    def get_ospf_areas(self, protocol):
        return self.areas

    def get_bfd_sessions(self, protocol):
        return self.sessions

    def get_prefix_stats(self, protocol):
        return self.prefix_stats

    def get_all_prefix_stats(self, ip_version):
        return self.table_stats


def by_name(metrics, name):
    return [m for m in metrics if m.name == name]


def test_failed_query_yields_only_zero_result():
    collector = MetricCollector(FakeClient(error=BirdSocketError("down")), ALL)
    metrics = collector.collect()
    assert [(m.name, m.value) for m in metrics] == [("bird_socket_query_success", 0.0)]


def test_generic_metrics_for_bgp():
    bgp = Protocol("bgp1", Proto.BGP, "4", uptime=60, up=1, state="Established", imported=12, exported=34)
    metrics = MetricCollector(FakeClient([bgp]), ALL).collect()

    assert (metrics[0].name, metrics[0].value) == ("bird_socket_query_success", 1.0)
    up = by_name(metrics, "bird_protocol_up")
    assert up[0].labels == {
        "name": "bgp1",
        "proto": "BGP",
        "ip_version": "4",
        "import_filter": "",
        "export_filter": "",
        "state": "Established",
    }
    assert up[0].value == 1.0
    assert by_name(metrics, "bird_protocol_prefix_import_count")[0].value == 12
    assert by_name(metrics, "bird_protocol_prefix_export_count")[0].value == 34
    assert by_name(metrics, "bird_protocol_uptime")[0].value == 60


def test_disabled_protocol_is_skipped():
    bgp = Protocol("bgp1", Proto.BGP, "4")
    metrics = MetricCollector(FakeClient([bgp]), Proto.OSPF).collect()
    assert [m.name for m in metrics] == ["bird_socket_query_success"]


def test_unknown_protocol_is_skipped():
    device = Protocol("device1", Proto.UNKNOWN, "4")
    metrics = MetricCollector(FakeClient([device]), ALL).collect()
    assert [m.name for m in metrics] == ["bird_socket_query_success"]


def test_legacy_format_uses_ip_version_prefixes():
    protocols = [Protocol("a", Proto.BGP, "4", imported=5), Protocol("b", Proto.BGP, "6", imported=7)]
    metrics = MetricCollector(FakeClient(protocols), ALL, new_format=False).collect()

    assert by_name(metrics, "bgp4_session_up")[0].labels == {"name": "a", "state": ""}
    assert by_name(metrics, "bgp6_session_prefix_count_import")[0].value == 7
    assert by_name(metrics, "bird_protocol_up") == []


def test_ospf_metrics():
    ospf = Protocol("ospf1", Proto.OSPF, "4", state="Running")
    area = OSPFArea("0", interface_count=3, neighbor_count=2, neighbor_adjacent_count=1)
    metrics = MetricCollector(FakeClient([ospf], areas=[area]), ALL).collect()

    assert by_name(metrics, "bird_ospf_running")[0].value == 1.0
    interfaces = by_name(metrics, "bird_ospf_interface_count")
    assert interfaces[0].labels == {"name": "ospf1", "area": "0"}
    assert interfaces[0].value == 3
    assert by_name(metrics, "bird_ospf_neighbor_adjacent_count")[0].value == 1


def test_bfd_metrics():
    bfd = Protocol("bfd1", Proto.BFD, "4")
    session = BFDSession("bfd1", "192.0.2.1", "eth0", True, since=3600, interval=0.1, timeout=1.0)
    metrics = MetricCollector(FakeClient([bfd], sessions=[session]), ALL).collect()

    uptime = by_name(metrics, "bird_bfd_session_uptime_seconds")
    assert uptime[0].value == 3600
    assert uptime[0].labels == {"name": "bfd1", "ip": "192.0.2.1", "interface": "eth0"}
    assert by_name(metrics, "bird_protocol_up") == []


def test_prefix_size_metrics():
    bgp = Protocol("bgp1", Proto.BGP, "4")
    stats = PrefixStats("4", "bgp1", {24: 3})
    metrics = MetricCollector(FakeClient([bgp], prefix_stats=stats), ALL, prefix_size=True).collect()

    counts = by_name(metrics, "bird_prefix_length_count")
    assert [(m.labels["prefix_length"], m.value) for m in counts] == [("24", 3.0)]


def test_table_prefix_size_metrics():
    bgp = Protocol("bgp1", Proto.BGP, "4")
    stats = PrefixStats("4", "all_routes", {8: 1})
    metrics = MetricCollector(
        FakeClient([bgp], table_stats=stats), ALL, table_prefix_size=True
    ).collect()

    counts = by_name(metrics, "bird_table_prefix_length_count")
    assert counts[0].labels == {"ip_version": "4", "prefix_length": "8", "table": "master4"}
    assert counts[0].value == 1.0


def test_description_labels():
    bgp = Protocol("bgp1", Proto.BGP, "4", description="team=core")
    metrics = MetricCollector(FakeClient([bgp]), ALL, description_labels=True).collect()
    assert by_name(metrics, "bird_protocol_uptime")[0].labels["team"] == "core"


def test_default_exporters_with_prefix_size():
    exporters = exporters_for_default(FakeClient(), False, r"(\w+)=(\w+)", True, False)

    assert set(exporters) == {
        Proto.BGP, Proto.OSPF, Proto.KERNEL, Proto.STATIC,
        Proto.DIRECT, Proto.BABEL, Proto.RPKI, Proto.BFD,
    }
    for proto in (Proto.BGP, Proto.OSPF, Proto.KERNEL, Proto.STATIC, Proto.DIRECT, Proto.BABEL):
        assert isinstance(exporters[proto][-1], PrefixSizeExporter)
    for proto in (Proto.RPKI, Proto.BFD):
        assert not any(isinstance(e, PrefixSizeExporter) for e in exporters[proto])
    assert len(exporters[Proto.OSPF]) == 3
    assert len(exporters[Proto.RPKI]) == 1


def test_legacy_exporters_with_table_prefix_size():
    exporters = exporters_for_legacy(FakeClient(), False, True)

    table_exporters = [
        e for lst in exporters.values() for e in lst if isinstance(e, TablePrefixSizeExporter)
    ]
    assert len(table_exporters) == 1
    assert exporters[Proto.BGP][-1] is table_exporters[0]


def test_describe_lists_each_descriptor_once():
    descs = MetricCollector(FakeClient(), ALL).describe()
    names = [d.name for d in descs]

    assert names[0] == "bird_socket_query_success"
    assert len(descs) == len(set(descs))
    assert {"bird_bfd_session_up", "bird_ospf_running", "bird_ospfv3_running"} <= set(names)


def test_legacy_describe_uses_unprefixed_ospf():
    names = {d.name for d in MetricCollector(FakeClient(), ALL, new_format=False).describe()}
    assert {"ospf_running", "ospfv3_neighbor_count"} <= names
    assert "bird_ospf_running" not in names


@pytest.mark.parametrize("error, expected", [(None, "1"), (BirdSocketError("down"), "0")])
def test_formatted_query_result(error, expected):
    text = format_metrics(MetricCollector(FakeClient(error=error), ALL).collect())
    assert f"bird_socket_query_success {expected}\n" in text