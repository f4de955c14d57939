"""Exporter for the sessions of BFD protocol instances."""

from __future__ import annotations

import logging
from typing import Protocol as _Interface

from .birdsocket import BirdSocketError
from .exposition import Metric, MetricDesc, MetricExporter
from .protocol import BFDSession, Proto, Protocol

log = logging.getLogger(__name__)

_LABELS = ("name", "ip", "interface")
_PREFIX = "bird_bfd_session_"

_UP = MetricDesc(_PREFIX + "up", "Session is up", _LABELS)
_UPTIME = MetricDesc(_PREFIX + "uptime_seconds", "Session uptime in seconds", _LABELS)
_INTERVAL = MetricDesc(_PREFIX + "interval_seconds", "Session uptime in seconds", _LABELS)
_TIMEOUT = MetricDesc(_PREFIX + "timeout_seconds", "Session timeout in seconds", _LABELS)


class _BFDSource(_Interface):
    def get_bfd_sessions(self, protocol: Protocol) -> list[BFDSession]: ...


class BFDExporter(MetricExporter):
    """Exports state, uptime, interval and timeout of every BFD session."""

    def __init__(self, client: _BFDSource) -> None:
        self.client = client

    def describe(self) -> list[MetricDesc]:
        return [_UP, _UPTIME, _INTERVAL, _TIMEOUT]

    def export(self, protocol: Protocol, new_format: bool) -> list[Metric]:
        if protocol.proto != Proto.BFD:
            return []
        try:
            sessions = self.client.get_bfd_sessions(protocol)
        except BirdSocketError as exc:
            log.error("%s", exc)
            return []

        metrics: list[Metric] = []
        for session in sessions:
            metrics.extend(self._export_session(session, protocol.name))
        return metrics

    @staticmethod
    def _export_session(session: BFDSession, protocol_name: str) -> list[Metric]:
        labels = (protocol_name, session.ip, session.interface)
        up = 1.0 if session.up else 0.0
        uptime = float(session.since) if session.up else 0.0
        return [
            _UP.gauge(up, *labels),
            _UPTIME.gauge(uptime, *labels),
            _INTERVAL.gauge(session.interval, *labels),
            _TIMEOUT.gauge(session.timeout, *labels),
        ]