"""Hierarchical metric scopes.

A Monitor is an immutable node in a tree of named scopes. Deriving a child
appends name segments; creating a metric joins the segments and the leaf
name into one identifier and asks the shared registry for it:

    root = Monitor()
    queries = root.named("db", "queries")
    errors = queries.new_counter("errors")   # registered as "db/queries/errors"

Every monitor derived from the same root shares one MetricRegistry. Removal
and close() act on that whole registry, not on the monitor's subtree.
"""

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from metrics_monitor.exceptions import ConfigurationError, InvalidNameException
from metrics_monitor.metrics import (
    Counter,
    Gauge,
    Histogram,
    Meter,
    Metric,
    Timer,
    TimerPair,
)
from metrics_monitor.naming import NamingPolicy
from metrics_monitor.registry import MetricRegistry, SupplierGauge

logger = logging.getLogger(__name__)

M = TypeVar("M")
T = TypeVar("T")


def _check_name(name: object) -> str:
    if not isinstance(name, str):
        raise InvalidNameException(name)
    return name


class Monitor:
    """Immutable named scope mediating the creation of metrics."""

    def __init__(
        self,
        registry: MetricRegistry | None = None,
        naming: NamingPolicy | None = None,
        separator: str | None = None,
        segments: tuple[str, ...] = (),
    ):
        """Create a root monitor.

        Args:
            registry: Registry shared by the whole tree; a fresh one by default.
            naming: Policy for timer pair names; the default policy by default.
            separator: Joins name segments; defaults to the policy's separator.
            segments: Leading name segments every metric of the tree carries.
        """
        self._registry = registry if registry is not None else MetricRegistry()
        self._naming = naming if naming is not None else NamingPolicy.default()
        self._separator = (
            separator if separator is not None else self._naming.default_separator
        )
        if not self._separator:
            raise ConfigurationError("Name separator must not be empty")
        self._segments = tuple(_check_name(segment) for segment in segments)

    @property
    def registry(self) -> MetricRegistry:
        return self._registry

    @property
    def naming(self) -> NamingPolicy:
        return self._naming

    @property
    def separator(self) -> str:
        return self._separator

    @property
    def segments(self) -> tuple[str, ...]:
        return self._segments

    @property
    def name(self) -> str:
        """Fully qualified name of this scope, without any metric leaf."""
        return self._construct_metric_name()

    def named(self, name: str, *rest_of_names: str) -> "Monitor":
        """Derive a child scope; several names nest left to right."""
        names = tuple(_check_name(n) for n in (name, *rest_of_names))
        return Monitor(
            registry=self._registry,
            naming=self._naming,
            separator=self._separator,
            segments=self._segments + names,
        )

    def new_meter(self, name: str) -> Meter:
        return self._with_metric_name(name, lambda n: Meter(n, self._registry.meter(n)))

    def new_counter(self, name: str) -> Counter:
        return self._with_metric_name(
            name, lambda n: Counter(n, self._registry.counter(n))
        )

    def new_histogram(self, name: str) -> Histogram:
        return self._with_metric_name(
            name, lambda n: Histogram(n, self._registry.histogram(n))
        )

    def new_timer(self, name: str) -> Timer:
        return self._with_metric_name(name, lambda n: Timer(n, self._registry.timer(n)))

    def new_timer_pair(self, name: str) -> TimerPair:
        _check_name(name)
        return TimerPair(
            self.new_timer(self._naming.success_name(name)),
            self.new_timer(self._naming.failure_name(name)),
        )

    def new_gauge(
        self, name: str, supplier: Callable[[], T], replace_existing: bool = False
    ) -> Gauge[T]:
        """Register a gauge reporting supplier() whenever the registry is sampled.

        With replace_existing, any metric already registered under the same
        identifier is removed first. Otherwise registering a taken identifier
        fails with the registry's DuplicateMetricException.
        """

        def create(final_name: str) -> Gauge[T]:
            supplier_gauge = SupplierGauge(final_name, supplier)
            if replace_existing:
                self._registry.remove(final_name)
            self._registry.register(final_name, supplier_gauge)
            return Gauge(final_name, supplier_gauge)

        return self._with_metric_name(name, create)

    def remove(self, metric: Metric) -> None:
        """Remove the metric's registry entry.

        The lookup is by the metric's full name across the whole registry, so
        it also removes a metric created through an unrelated monitor that
        resolved to the same name.
        """
        self._registry.remove(metric.name)

    def close(self) -> None:
        """Remove every metric from the shared registry.

        This resets the registry for the whole tree, including metrics
        created by parent and sibling monitors.
        """
        logger.debug(
            "Closing monitor (all metrics will be removed from the underlying registry)"
        )
        self._registry.remove_all()

    def _with_metric_name(self, name: str, metric_creator: Callable[[str], M]) -> M:
        final_name = self._construct_metric_name(_check_name(name))

        if logger.isEnabledFor(logging.DEBUG) and final_name not in self._registry:
            name_for_logging = final_name.replace(self._separator, "/")
            logger.debug(f"Creating metric '{name_for_logging}'")

        return metric_creator(final_name)

    def _construct_metric_name(self, leaf: str | None = None) -> str:
        names = list(self._segments)
        if leaf is not None:
            names.append(leaf)
        return self._separator.join(names)

    def __enter__(self) -> "Monitor":
        return self

    def __exit__(self, exc_type: Any, exc_value: Any, traceback: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Monitor({self.name!r})"
