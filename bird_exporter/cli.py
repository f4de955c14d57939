"""Command line entry point and HTTP server of the exporter."""

from __future__ import annotations

import argparse
import html
import logging
import socket
import ssl
from collections.abc import Sequence
from dataclasses import dataclass, fields
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import urlsplit

from .client import BirdClient, BirdClientOptions
from .collector import MetricCollector
from .exposition import format_metrics
from .protocol import Proto

log = logging.getLogger(__name__)

VERSION = "1.4.3"

_METRICS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


@dataclass
class ExporterConfig:
    """Settings of the exporter as given on the command line."""

    show_version: bool = False
    listen_address: str = ":9324"
    metrics_path: str = "/metrics"
    bird_socket: str = "/var/run/bird.ctl"
    bird_v2: bool = False
    tls_enabled: bool = False
    tls_cert_file: str = ""
    tls_key_file: str = ""
    new_format: bool = True
    proto_bgp: bool = True
    proto_ospf: bool = True
    proto_kernel: bool = True
    proto_static: bool = True
    proto_direct: bool = True
    proto_babel: bool = True
    proto_rpki: bool = True
    proto_bfd: bool = True
    prefix_size: bool = False
    table_prefix_size: bool = False
    bird6_socket: str = "/var/run/bird6.ctl"
    bird_ipv4: bool = True
    bird_ipv6: bool = True
    description_labels: bool = False
    description_labels_regex: str = r"(\w+)=(\w+)"


# (flag, ExporterConfig field, help)
_FLAGS = (
    ("version", "show_version", "Print version information."),
    ("web.listen-address", "listen_address", "Address on which to expose metrics and web interface."),
    ("web.telemetry-path", "metrics_path", "Path under which to expose metrics."),
    ("bird.socket", "bird_socket", "Socket to communicate with bird routing daemon"),
    ("bird.v2", "bird_v2", "Bird major version >= 2.0 (multi channel protocols)"),
    ("tls.enabled", "tls_enabled", "Enables TLS"),
    ("tls.cert-file", "tls_cert_file", "Path to TLS cert file"),
    ("tls.key-file", "tls_key_file", "Path to TLS key file"),
    ("format.new", "new_format", "New metric format (more convenient / generic)"),
    ("proto.bgp", "proto_bgp", "Enables metrics for protocol BGP"),
    ("proto.ospf", "proto_ospf", "Enables metrics for protocol OSPF"),
    ("proto.kernel", "proto_kernel", "Enables metrics for protocol Kernel"),
    ("proto.static", "proto_static", "Enables metrics for protocol Static"),
    ("proto.direct", "proto_direct", "Enables metrics for protocol Direct"),
    ("proto.babel", "proto_babel", "Enables metrics for protocol Babel"),
    ("proto.rpki", "proto_rpki", "Enables metrics for protocol RPKI"),
    ("proto.bfd", "proto_bfd", "Enables metrics for protocol BFD"),
    ("prefix.size", "prefix_size", "Enables prefix size statistics collection per protocol"),
    (
        "prefix.size.table",
        "table_prefix_size",
        "Enables prefix size statistics collection for entire routing table (unique prefixes)",
    ),
    (
        "bird.socket6",
        "bird6_socket",
        "Socket to communicate with bird6 routing daemon (not compatible with -bird.v2)",
    ),
    ("bird.ipv4", "bird_ipv4", "Get protocols from bird (not compatible with -bird.v2)"),
    ("bird.ipv6", "bird_ipv6", "Get protocols from bird6 (not compatible with -bird.v2)"),
    ("format.description-labels", "description_labels", "Add labels from protocol descriptions."),
    (
        "format.description-labels-regex",
        "description_labels_regex",
        "Regex to extract labels from protocol description",
    ),
)

_PROTOCOL_SWITCHES = (
    ("proto_bgp", Proto.BGP),
    ("proto_ospf", Proto.OSPF),
    ("proto_kernel", Proto.KERNEL),
    ("proto_static", Proto.STATIC),
    ("proto_direct", Proto.DIRECT),
    ("proto_babel", Proto.BABEL),
    ("proto_rpki", Proto.RPKI),
    ("proto_bfd", Proto.BFD),
)

_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def _bool(value: str) -> bool:
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value {value!r}")


def _argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bird_exporter", usage="bird_exporter [ ... ]", allow_abbrev=False
    )
    defaults = {f.name: f.default for f in fields(ExporterConfig)}
    for flag, dest, help_text in _FLAGS:
        default = defaults[dest]
        if isinstance(default, bool):
            parser.add_argument(
                f"-{flag}", f"--{flag}", dest=dest, default=default, help=help_text,
                nargs="?", const=True, type=_bool, metavar="BOOL",
            )
        else:
            parser.add_argument(
                f"-{flag}", f"--{flag}", dest=dest, default=default, help=help_text, metavar="VALUE"
            )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> ExporterConfig:
    """Parse command line flags (``-flag``, ``-flag=value``, ``-flag value``)."""
    namespace = _argument_parser().parse_args(argv)
    return ExporterConfig(**vars(namespace))


def enabled_protocols(config: ExporterConfig) -> Proto:
    """Mask of the protocol kinds whose metrics are enabled."""
    result = Proto.UNKNOWN
    for attribute, proto in _PROTOCOL_SWITCHES:
        if getattr(config, attribute):
            result |= proto
    return result


def build_client(config: ExporterConfig) -> BirdClient:
    """Client for the bird socket(s) named in the configuration."""
    return BirdClient(
        BirdClientOptions(
            bird_v2=config.bird_v2,
            bird_enabled=config.bird_ipv4,
            bird6_enabled=config.bird_ipv6,
            bird_socket=config.bird_socket,
            bird6_socket=config.bird6_socket,
        )
    )


def render_index(metrics_path: str) -> str:
    """HTML landing page linking to the metrics."""
    path = html.escape(metrics_path, quote=True)
    return (
        "<html>\n"
        f"<head><title>Bird Routing Daemon Exporter (Version {VERSION})</title></head>\n"
        "<body>\n"
        "<h1>Bird Routing Daemon Exporter</h1>\n"
        f'<p><a href="{path}">Metrics</a></p>\n'
        "</body>\n"
        "</html>\n"
    )


def render_metrics(config: ExporterConfig) -> str:
    """Query bird and render one scrape in the Prometheus text format."""
    collector = MetricCollector(
        build_client(config),
        enabled_protocols(config),
        new_format=config.new_format,
        description_labels=config.description_labels,
        description_labels_regex=config.description_labels_regex,
        prefix_size=config.prefix_size,
        table_prefix_size=config.table_prefix_size,
    )
    return format_metrics(collector.collect())


def version_text() -> str:
    """Text printed for ``-version``."""
    return f"bird_exporter\nVersion: {VERSION}\nMetric exporter for bird routing daemon"


class _Handler(BaseHTTPRequestHandler):
    server_version = f"bird_exporter/{VERSION}"

    def do_GET(self) -> None:
        self._respond(with_body=True)

    def do_HEAD(self) -> None:
        self._respond(with_body=False)

    def _respond(self, with_body: bool) -> None:
        config: ExporterConfig = self.server.config  # type: ignore[attr-defined]
        if urlsplit(self.path).path == config.metrics_path:
            try:
                body = render_metrics(config).encode()
            except Exception:
                log.exception("collecting metrics failed")
                self.send_error(500)
                return
            content_type = _METRICS_CONTENT_TYPE
        else:
            body = render_index(config.metrics_path).encode()
            content_type = "text/html; charset=utf-8"

        self.send_response(200)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if with_body:
            self.wfile.write(body)

    def log_message(self, format: str, *args: object) -> None:
        log.debug("%s - %s", self.address_string(), format % args)


class _ExporterServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address: tuple[str, int], config: ExporterConfig) -> None:
        self.config = config
        super().__init__(address, _Handler)


class _ExporterServer6(_ExporterServer):
    address_family = socket.AF_INET6


def _split_address(address: str) -> tuple[str, int]:
    host, sep, port_text = address.rpartition(":")
    if not sep or not port_text.isdigit():
        raise ValueError(f"invalid listen address {address!r}")
    port = int(port_text)
    if port > 65535:
        raise ValueError(f"invalid port in listen address {address!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host, port


def make_server(config: ExporterConfig) -> ThreadingHTTPServer:
    """Bind the HTTP(S) server serving the index page and the metrics."""
    host, port = _split_address(config.listen_address)
    server_class = _ExporterServer6 if ":" in host else _ExporterServer
    server = server_class((host, port), config)
    if config.tls_enabled:
        try:
            context = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
            context.load_cert_chain(config.tls_cert_file, config.tls_key_file)
            server.socket = context.wrap_socket(server.socket, server_side=True)
        except BaseException:
            server.server_close()
            raise
    return server


def main(argv: Sequence[str] | None = None) -> int:
    """Run the exporter until interrupted."""
    config = parse_args(argv)
    if config.show_version:
        print(version_text())
        return 0

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    log.info("Starting bird exporter (Version: %s)", VERSION)
    if not config.new_format:
        log.info(
            "INFO: You are using the old metric format. Please consider using the new "
            "(more convenient one) by setting -format.new=true."
        )

    log.info(
        "Listening for %s on %s (TLS: %s)",
        config.metrics_path,
        config.listen_address,
        config.tls_enabled,
    )
    try:
        server = make_server(config)
    except (OSError, ValueError) as exc:
        log.critical("%s", exc)
        return 1

    with server:
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
    return 0