import pytest

from bird_exporter.bfd_exporter import BFDExporter
from bird_exporter.birdsocket import BirdSocketError
from bird_exporter.protocol import BFDSession, Proto, Protocol


class FakeClient:
    def __init__(self, sessions=None, error=None):
        self.sessions = sessions or []
        self.error = error
        self.calls = []

    def get_bfd_sessions(self, protocol):
        self.calls.append(protocol.name)
        if self.error is not None:
            raise self.error
        return self.sessions


@pytest.fixture
def sessions():
    return [
        BFDSession("bfd1", "192.0.2.9", "eth0", True, 3600, 0, 0.1, 1.0),
        BFDSession("bfd1", "192.0.2.10", "eth1", False, 7200, 0, 0.3, 5.0),
    ]


def test_describe_lists_four_descriptors():
    names = [d.name for d in BFDExporter(FakeClient()).describe()]
    assert names == [
        "bird_bfd_session_up",
        "bird_bfd_session_uptime_seconds",
        "bird_bfd_session_interval_seconds",
        "bird_bfd_session_timeout_seconds",
    ]


def test_non_bfd_protocol_is_ignored(sessions):
    client = FakeClient(sessions)
    metrics = BFDExporter(client).export(Protocol("bgp1", Proto.BGP, "4"), True)
    assert metrics == []
    assert client.calls == []


def test_exports_up_session(sessions):
    client = FakeClient(sessions)
    metrics = BFDExporter(client).export(Protocol("bfd1", Proto.BFD, "4"), True)
    assert len(metrics) == 8
    first = {m.name: m for m in metrics[:4]}
    assert first["bird_bfd_session_up"].value == 1.0
    assert first["bird_bfd_session_uptime_seconds"].value == 3600.0
    assert first["bird_bfd_session_interval_seconds"].value == 0.1
    assert first["bird_bfd_session_timeout_seconds"].value == 1.0
    assert first["bird_bfd_session_up"].labels == {
        "name": "bfd1", "ip": "192.0.2.9", "interface": "eth0"
    }


def test_down_session_has_no_uptime(sessions):
    metrics = BFDExporter(FakeClient(sessions)).export(Protocol("bfd1", Proto.BFD, "4"), True)
    second = {m.name: m for m in metrics[4:]}
    assert second["bird_bfd_session_up"].value == 0.0
    assert second["bird_bfd_session_uptime_seconds"].value == 0.0
    assert second["bird_bfd_session_timeout_seconds"].value == 5.0
    assert second["bird_bfd_session_up"].label_values == ("bfd1", "192.0.2.10", "eth1")


def test_socket_error_yields_no_metrics():
    client = FakeClient(error=BirdSocketError("down"))
    metrics = BFDExporter(client).export(Protocol("bfd1", Proto.BFD, "4"), True)
    assert metrics == []
    assert client.calls == ["bfd1"]