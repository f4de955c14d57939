from datetime import datetime

from bird_exporter.bfd_parser import parse_bfd_sessions
from bird_exporter.protocol import BFDSession

NOW = datetime(2022, 1, 27, 10, 0, 0)

DATA = """BIRD 2.0.7 ready.
bfd1:
IP address                Interface  State      Since         Interval  Timeout
192.168.64.9              enp0s2     Up         2022-01-27 09:00:00 1697620076    0.100    1.000
192.168.64.10             enp0s2     Down       2022-01-27 08:00:00    0.300    0.000
192.168.64.12             enp0s2     Init       2022-01-27 08:00:00    0.300    5.000"""


def test_parse_bfd_sessions():
    sessions = parse_bfd_sessions("bfd1", DATA.encode(), NOW)

    assert len(sessions) == 3
    assert sessions == [
        BFDSession(
            protocol_name="bfd1",
            ip="192.168.64.9",
            interface="enp0s2",
            up=True,
            since=3600,
            since_epoch=1697620076,
            interval=0.1,
            timeout=1.0,
        ),
        BFDSession(
            protocol_name="bfd1",
            ip="192.168.64.10",
            interface="enp0s2",
            up=False,
            since=7200,
            since_epoch=0,
            interval=0.3,
            timeout=0.0,
        ),
        BFDSession(
            protocol_name="bfd1",
            ip="192.168.64.12",
            interface="enp0s2",
            up=False,
            since=7200,
            since_epoch=0,
            interval=0.3,
            timeout=5.0,
        ),
    ]


def test_accepts_text_input():
    assert parse_bfd_sessions("bfd1", DATA, NOW) == parse_bfd_sessions("bfd1", DATA.encode(), NOW)


def test_duration_since_column():
    line = "192.168.64.9   enp0s2   Up   00:01:00   0.100   1.000"
    sessions = parse_bfd_sessions("bfd1", line)
    assert len(sessions) == 1
    assert sessions[0].since == 60
    assert sessions[0].up is True


def test_header_lines_are_ignored():
    data = "BIRD 2.0.7 ready.\nbfd1:\nIP address   Interface  State  Since  Interval  Timeout\n"
    assert parse_bfd_sessions("bfd1", data, NOW) == []