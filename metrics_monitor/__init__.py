"""Hierarchical metric naming on top of a Prometheus-backed registry.

Build a tree of monitors and create metrics through it; every metric is
registered under its monitor's path joined with the leaf name:

    from metrics_monitor import Monitor

    monitor = Monitor().named("db", "queries")
    monitor.new_counter("errors").inc()      # "db/queries/errors"
    with monitor.new_timer_pair("select").start():
        run_query()
"""

from metrics_monitor.exceptions import (
    ConfigurationError,
    DuplicateMetricException,
    InvalidNameException,
    MetricNameCollisionException,
    MetricsException,
    MetricTypeConflictException,
)
from metrics_monitor.metrics import (
    Counter,
    Gauge,
    Histogram,
    Meter,
    Metric,
    Timer,
    TimerPair,
)
from metrics_monitor.monitor import Monitor
from metrics_monitor.naming import NamingPolicy, SuffixNaming
from metrics_monitor.registry import MetricRegistry

__all__ = [
    "ConfigurationError",
    "Counter",
    "DuplicateMetricException",
    "Gauge",
    "Histogram",
    "InvalidNameException",
    "Meter",
    "Metric",
    "MetricNameCollisionException",
    "MetricRegistry",
    "MetricTypeConflictException",
    "MetricsException",
    "Monitor",
    "NamingPolicy",
    "SuffixNaming",
    "Timer",
    "TimerPair",
]
