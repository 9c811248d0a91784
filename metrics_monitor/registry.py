"""Name-keyed metric registry backed by a Prometheus collector registry.

Monitors address metrics by free-form identifiers such as ``db/queries/errors``.
MetricRegistry keeps the identifier-to-metric table and mirrors every entry
into a ``prometheus_client.CollectorRegistry`` under a sanitized Prometheus
name, so all metrics created through monitors show up in the text exposition:

    registry = MetricRegistry()
    registry.counter("db/queries/errors").inc()
    print(registry.generate_text())

Native metric kinds:
    counter   -> prometheus Gauge (counters may go down as well as up)
    meter     -> prometheus Counter
    timer     -> prometheus Histogram, observed in seconds
    histogram -> prometheus Summary
    gauge     -> SupplierGauge, a custom collector sampled on every scrape
"""

import logging
import numbers
import re
import threading
from collections.abc import Callable, Iterator
from typing import Any

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    Summary,
    generate_latest,
)
from prometheus_client.core import GaugeMetricFamily

from metrics_monitor.exceptions import (
    DuplicateMetricException,
    MetricNameCollisionException,
    MetricTypeConflictException,
)

logger = logging.getLogger(__name__)

_INVALID_NAME_CHARS = re.compile(r"[^a-zA-Z0-9_:]")


def prometheus_name(identifier: str) -> str:
    """Convert a metric identifier into a valid Prometheus metric name."""
    name = _INVALID_NAME_CHARS.sub("_", identifier)
    if not name or name[0].isdigit():
        name = "_" + name
    return name


class SupplierGauge:
    """Prometheus collector reporting the current value of a supplier.

    The supplier is invoked each time the collector registry is sampled.
    A supplier returning None or a non-numeric value produces a gauge
    without samples; Gauge.value still returns the raw value.
    """

    def __init__(self, identifier: str, supplier: Callable[[], Any]) -> None:
        self.identifier = identifier
        self.prometheus_name = prometheus_name(identifier)
        self._supplier = supplier

    def get_value(self) -> Any:
        return self._supplier()

    def describe(self) -> list[GaugeMetricFamily]:
        return [GaugeMetricFamily(self.prometheus_name, self.identifier)]

    def collect(self) -> list[GaugeMetricFamily]:
        family = GaugeMetricFamily(self.prometheus_name, self.identifier)
        value = self._supplier()
        if isinstance(value, numbers.Real):
            family.add_metric([], float(value))
        elif value is not None:
            logger.debug(
                f"Gauge '{self.identifier}' has non-numeric value {value!r}, not exported"
            )
        return [family]


_NATIVE_KINDS: dict[str, type] = {
    "counter": Gauge,
    "meter": Counter,
    "timer": Histogram,
    "histogram": Summary,
}


# Sample suffixes prometheus_client reserves per metric family type
_TYPE_SUFFIXES: dict[str, tuple[str, ...]] = {
    "counter": ("_total", "_created"),
    "summary": ("_sum", "_count", "_created"),
    "histogram": ("_bucket", "_sum", "_count", "_created"),
}


def _timeseries_names(metric: Any) -> set[str]:
    names = set()
    for family in metric.describe():
        names.add(family.name)
        for suffix in _TYPE_SUFFIXES.get(family.type, ()):
            names.add(family.name + suffix)
    return names


def _kind_of(metric: object) -> str:
    for kind, native_type in _NATIVE_KINDS.items():
        if isinstance(metric, native_type):
            return kind
    if isinstance(metric, SupplierGauge):
        return "gauge"
    return type(metric).__name__


class MetricRegistry:
    """Thread-safe store of metrics keyed by their flattened identifier.

    All mutations hold a re-entrant lock, so get-or-create, register and
    remove are atomic per identifier.
    """

    def __init__(self, collector_registry: CollectorRegistry | None = None):
        """Initialize the registry.

        Args:
            collector_registry: Prometheus registry to mirror metrics into.
                A fresh, private registry is created when omitted.
        """
        self._collector_registry = (
            collector_registry if collector_registry is not None else CollectorRegistry()
        )
        self._metrics: dict[str, Any] = {}
        self._lock = threading.RLock()

    @property
    def collector_registry(self) -> CollectorRegistry:
        return self._collector_registry

    def counter(self, name: str) -> Gauge:
        return self._get_or_create(name, "counter")

    def meter(self, name: str) -> Counter:
        return self._get_or_create(name, "meter")

    def timer(self, name: str) -> Histogram:
        return self._get_or_create(name, "timer")

    def histogram(self, name: str) -> Summary:
        return self._get_or_create(name, "histogram")

    def register(self, name: str, metric: Any) -> Any:
        """Register a collector under the given identifier.

        Raises:
            DuplicateMetricException: If the identifier is already taken.
            MetricNameCollisionException: If the exported Prometheus names
                clash with another registered metric.
        """
        with self._lock:
            if name in self._metrics:
                raise DuplicateMetricException(name)

            return self._register_collector(name, metric)

    def remove(self, name: str) -> bool:
        """Remove the metric registered under the identifier, if any."""
        with self._lock:
            metric = self._metrics.pop(name, None)
            if metric is None:
                return False

            self._collector_registry.unregister(metric)
            logger.debug(f"Removed metric '{name}'")
            return True

    def remove_matching(self, predicate: Callable[[str, Any], bool]) -> None:
        """Remove every metric for which predicate(name, metric) is true."""
        with self._lock:
            for name, metric in list(self._metrics.items()):
                if predicate(name, metric):
                    self.remove(name)

    def remove_all(self) -> None:
        self.remove_matching(lambda name, metric: True)

    def get_names(self) -> set[str]:
        with self._lock:
            return set(self._metrics)

    def get_metric(self, name: str) -> Any | None:
        with self._lock:
            return self._metrics.get(name)

    def generate_text(self) -> str:
        """Generate all registered metrics in Prometheus text format."""
        return generate_latest(self._collector_registry).decode("utf-8")

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._metrics

    def __len__(self) -> int:
        with self._lock:
            return len(self._metrics)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.get_names()))

    def _get_or_create(self, name: str, kind: str) -> Any:
        with self._lock:
            existing = self._metrics.get(name)
            if existing is not None:
                if not isinstance(existing, _NATIVE_KINDS[kind]):
                    raise MetricTypeConflictException(name, _kind_of(existing), kind)
                return existing

            native_type = _NATIVE_KINDS[kind]
            metric = native_type(prometheus_name(name), name, registry=None)
            return self._register_collector(name, metric)

    def _register_collector(self, name: str, metric: Any) -> Any:
        try:
            self._collector_registry.register(metric)
        except ValueError as e:
            clashing = _timeseries_names(metric)
            for existing_name, existing in self._metrics.items():
                shared = _timeseries_names(existing) & clashing
                if shared:
                    raise MetricNameCollisionException(
                        name, existing_name, sorted(shared)
                    ) from e
            raise MetricNameCollisionException(name, None, sorted(clashing)) from e

        self._metrics[name] = metric
        return metric
