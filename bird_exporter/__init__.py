"""Prometheus metric exporter for the BIRD routing daemon: socket client, output parsers, exporters and HTTP server."""

__version__ = "1.4.3"