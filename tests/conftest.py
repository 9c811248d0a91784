"""Pytest fixtures for metric monitor tests."""

import pytest

from metrics_monitor.monitor import Monitor
from metrics_monitor.registry import MetricRegistry


@pytest.fixture
def registry() -> MetricRegistry:
    """Fresh registry backed by a private Prometheus collector registry."""
    return MetricRegistry()


@pytest.fixture
def monitor(registry: MetricRegistry) -> Monitor:
    """Root monitor over the test registry."""
    return Monitor(registry=registry)
