"""Gauge metrics and their rendering in the Prometheus text exposition format."""

from __future__ import annotations

import logging
import math
import re
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from .protocol import Protocol

log = logging.getLogger(__name__)

_METRIC_NAME_RE = re.compile(r"[a-zA-Z_:][a-zA-Z0-9_:]*")
_LABEL_NAME_RE = re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*")
_RESERVED_LABEL_PREFIX = "__"


@dataclass(frozen=True)
class MetricDesc:
    """Name, help text and label names shared by the metrics of one family."""

    name: str
    help: str
    label_names: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "label_names", tuple(self.label_names))
        if not _METRIC_NAME_RE.fullmatch(self.name):
            raise ValueError(f"invalid metric name {self.name!r}")
        seen: set[str] = set()
        for label in self.label_names:
            if not _LABEL_NAME_RE.fullmatch(label) or label.startswith(_RESERVED_LABEL_PREFIX):
                raise ValueError(f"invalid label name {label!r} for metric {self.name!r}")
            if label in seen:
                raise ValueError(f"duplicate label name {label!r} for metric {self.name!r}")
            seen.add(label)

    def gauge(self, value: float, *args: str) -> Metric:
        """Create a gauge sample of this family with the given label values."""
        if len(args) != len(self.label_names):
            raise ValueError(
                f"metric {self.name!r} expects {len(self.label_names)} label values, got {len(args)}"
            )
        return Metric(self, float(value), tuple(args))


@dataclass(frozen=True)
class Metric:
    """One gauge sample."""

    desc: MetricDesc
    value: float
    label_values: tuple[str, ...] = field(default=())

    @property
    def name(self) -> str:
        return self.desc.name

    @property
    def labels(self) -> dict[str, str]:
        return dict(zip(self.desc.label_names, self.label_values))


class MetricExporter(ABC):
    """Turns a protocol into metrics."""

    @abstractmethod
    def describe(self) -> list[MetricDesc]:
        """Descriptors known up front; exporters with dynamic metrics return none."""

    @abstractmethod
    def export(self, protocol: Protocol, new_format: bool) -> list[Metric]:
        """Metrics for one protocol."""


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    sign = "-" if math.copysign(1.0, value) < 0 else ""
    _, digit_tuple, exponent = Decimal(repr(abs(value))).as_tuple()
    digits = "".join(map(str, digit_tuple))
    point = len(digits) + exponent
    digits = digits.rstrip("0")
    if not digits:
        return sign + "0"
    exp = point - 1
    if exp < -4 or exp >= 6:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        return f"{sign}{mantissa}e{'-' if exp < 0 else '+'}{abs(exp):02d}"
    if point <= 0:
        return f"{sign}0.{'0' * -point}{digits}"
    if point >= len(digits):
        return sign + digits + "0" * (point - len(digits))
    return f"{sign}{digits[:point]}.{digits[point:]}"


def _escape_help(text: str) -> str:
    return text.replace("\\", "\\\\").replace("\n", "\\n")


def _escape_label_value(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


@dataclass
class _Family:
    help: str
    label_names: tuple[str, ...]
    samples: dict[tuple[tuple[str, str], ...], float] = field(default_factory=dict)


def format_metrics(metrics: Iterable[Metric]) -> str:
    """Render metrics as Prometheus text, families and samples sorted.

    Metrics that clash with an earlier one of the same family (other help,
    other label names, or the same label values) are logged and left out.
    """
    families: dict[str, _Family] = {}
    for metric in metrics:
        pairs = tuple(sorted(zip(metric.desc.label_names, metric.label_values)))
        names = tuple(name for name, _ in pairs)
        family = families.get(metric.name)
        if family is None:
            family = families[metric.name] = _Family(metric.desc.help, names)
        elif family.help != metric.desc.help or family.label_names != names:
            log.error("metric %s is inconsistent with its family, dropped", metric.name)
            continue
        if pairs in family.samples:
            log.error("metric %s %s was collected twice, dropped", metric.name, dict(pairs))
            continue
        family.samples[pairs] = metric.value

    lines: list[str] = []
    for name in sorted(families):
        family = families[name]
        lines.append(f"# HELP {name} {_escape_help(family.help)}")
        lines.append(f"# TYPE {name} gauge")
        for pairs in sorted(family.samples):
            value = _format_float(family.samples[pairs])
            if pairs:
                rendered = ",".join(f'{k}="{_escape_label_value(v)}"' for k, v in pairs)
                lines.append(f"{name}{{{rendered}}} {value}")
            else:
                lines.append(f"{name} {value}")
    return "".join(line + "\n" for line in lines)