# bird_exporter

A Prometheus exporter for the BIRD routing daemon. On every scrape it queries
the BIRD control socket (`show protocols all`, and `show ospf` / `show bfd
sessions` for OSPF and BFD protocols) and serves protocol state, route counts,
route change statistics, OSPF area counters and BFD session data in the
Prometheus text exposition format. It has no third-party dependencies.

## Installation

```
pip install .
```

## Running

```
bird_exporter
```

By default the exporter listens on `:9324` and serves metrics under
`/metrics`. Any other path returns a small HTML page linking to the metrics
path. `GET` and `HEAD` requests are answered.

Options are given as `-flag value`, `-flag=value` or, for switches, just
`-flag` (meaning true); `--flag` works as well. Boolean values accept `1`,
`t`, `true`, `0`, `f`, `false` and their capitalised forms.

| Option | Default | Meaning |
| --- | --- | --- |
| `-web.listen-address` | `:9324` | Address to listen on (`host:port`, `[ipv6]:port` or `:port`) |
| `-web.telemetry-path` | `/metrics` | Path under which metrics are exposed |
| `-bird.socket` | `/var/run/bird.ctl` | BIRD control socket |
| `-bird.socket6` | `/var/run/bird6.ctl` | bird6 control socket (not used with `-bird.v2`) |
| `-bird.v2` | `false` | BIRD 2.x or later (multi channel protocols, one socket) |
| `-bird.ipv4` / `-bird.ipv6` | `true` | Query bird / bird6 (not used with `-bird.v2`) |
| `-format.new` | `true` | Use the generic `bird_protocol_*` metric names |
| `-format.description-labels` | `false` | Add labels parsed from protocol descriptions |
| `-format.description-labels-regex` | `(\w+)=(\w+)` | Regex whose first group is the label name, second the value |
| `-proto.bgp`, `-proto.ospf`, `-proto.kernel`, `-proto.static`, `-proto.direct`, `-proto.babel`, `-proto.rpki`, `-proto.bfd` | `true` | Enable metrics per protocol type |
| `-prefix.size` | `false` | Per-protocol route counts by prefix length |
| `-prefix.size.table` | `false` | Route counts by prefix length for the whole `master4` / `master6` table |
| `-tls.enabled`, `-tls.cert-file`, `-tls.key-file` | off | Serve over TLS with the given certificate chain and key |
| `-version` | | Print version information and exit |

For BIRD 2:

```
bird_exporter -bird.v2 -bird.socket /run/bird/bird.ctl
```

## Metrics

Every scrape reports `bird_socket_query_success` (1 if `show protocols all`
could be queried, 0 otherwise).

With the new format (`-format.new`, the default) each protocol yields
`bird_protocol_up` (with a `state` label), `bird_protocol_prefix_import_count`,
`bird_protocol_prefix_export_count`, `bird_protocol_prefix_filter_count`,
`bird_protocol_prefix_preferred_count`, `bird_protocol_uptime` and the
`bird_protocol_changes_{update,withdraw}_{import,export}_{receive,reject,filter,accept,ignore}_count`
counters, labelled with `name`, `proto`, `ip_version`, `import_filter` and
`export_filter` (plus any description labels). OSPF protocols add
`bird_ospf_*` / `bird_ospfv3_*` metrics (`_running`, `_interface_count`,
`_neighbor_count`, `_neighbor_adjacent_count`), and BFD protocols add
`bird_bfd_session_up`, `_uptime_seconds`, `_interval_seconds` and
`_timeout_seconds`.

With `-format.new=false` the older names are used: per-family prefixes such as
`bgp4_session_*` / `bgp6_session_*`, `direct4_*`, `kernel4_*`, `ospf_*` /
`ospfv3_*` with `prefix_count_import` style suffixes and only a `name` label.

The prefix length options add `bird_prefix_length_count` and
`bird_table_prefix_length_count` (or `bird_prefix_count_by_length` and
`bird_table_prefix_count_by_length` in the old format).

## Library use

The parsers work on raw command output (bytes or str):

- `bird_exporter.protocols_parser.parse_protocols(data, ip_version)` for
  `show protocols all`; an empty `ip_version` splits BIRD 2 channels into
  separate entries.
- `bird_exporter.ospf_parser.parse_ospf(data)` for `show ospf`.
- `bird_exporter.bfd_parser.parse_bfd_sessions(protocol_name, data)` for
  `show bfd sessions`.
- `bird_exporter.route_parser.parse_prefix_stats(protocol_name, ip_version, data)`
  for route listings.

`bird_exporter.client.BirdClient` queries the socket(s) described by
`BirdClientOptions`; `bird_exporter.collector.MetricCollector` runs the
exporters and `bird_exporter.exposition.format_metrics` renders the result.
`bird_exporter.cli.render_metrics(config)` does a whole scrape for an
`ExporterConfig`.

## Tests

```
pip install .[test]
pytest
```