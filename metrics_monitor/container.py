"""Dependency injection container for the metric monitor tree."""

import logging
from collections.abc import Iterator

from dependency_injector import containers, providers
from prometheus_client import CollectorRegistry

from metrics_monitor.config import Settings
from metrics_monitor.monitor import Monitor
from metrics_monitor.naming import NamingPolicy, SuffixNaming
from metrics_monitor.registry import MetricRegistry

logger = logging.getLogger(__name__)


def init_root_monitor(
    registry: MetricRegistry, naming: NamingPolicy, segments: list[str]
) -> Iterator[Monitor]:
    """Provide the root monitor and clear its registry on resource shutdown."""
    monitor = Monitor(registry=registry, naming=naming, segments=tuple(segments))
    logger.debug(f"Initialized root monitor '{monitor.name}'")
    yield monitor
    monitor.close()


class MonitorContainer(containers.DeclarativeContainer):
    """Container wiring settings, registry and naming into a root monitor.

    Usage:
        container = create_container()
        monitor = container.root_monitor()
        ...
        container.shutdown_resources()
    """

    config = providers.Dependency(instance_of=Settings)

    naming = providers.Singleton(
        SuffixNaming,
        success_suffix=config.provided.success_suffix,
        failure_suffix=config.provided.failure_suffix,
        separator=config.provided.name_separator,
    )

    collector_registry = providers.Singleton(CollectorRegistry)

    registry = providers.Singleton(
        MetricRegistry,
        collector_registry=collector_registry,
    )

    root_monitor = providers.Resource(
        init_root_monitor,
        registry=registry,
        naming=naming,
        segments=config.provided.root_segments,
    )


def create_container(settings: Settings | None = None) -> MonitorContainer:
    """Build a container from validated settings, loading them if omitted."""
    if settings is None:
        settings = Settings.load()

    settings.validate_config()

    container = MonitorContainer()
    container.config.override(settings)
    return container
