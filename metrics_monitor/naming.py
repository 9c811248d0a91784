"""Naming policies deriving paired metric names."""

import logging
from abc import ABC, abstractmethod

from metrics_monitor.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR = "/"


class NamingPolicy(ABC):
    """Strategy for deriving success/failure names from a base metric name.

    Policies are stateless and shared by every monitor of a tree.
    """

    @abstractmethod
    def success_name(self, base: str) -> str:
        """Name of the metric tracking successful executions of ``base``."""
        pass

    @abstractmethod
    def failure_name(self, base: str) -> str:
        """Name of the metric tracking failed executions of ``base``."""
        pass

    @property
    @abstractmethod
    def default_separator(self) -> str:
        """Separator used by monitors that are not given one explicitly."""
        pass

    @staticmethod
    def default() -> "NamingPolicy":
        return _DEFAULT_NAMING

    @staticmethod
    def with_suffixes(
        success_suffix: str, failure_suffix: str, separator: str = DEFAULT_SEPARATOR
    ) -> "NamingPolicy":
        return SuffixNaming(success_suffix, failure_suffix, separator)


class SuffixNaming(NamingPolicy):
    """Appends a fixed suffix to the base name for each variant.

    An empty suffix is accepted, but the corresponding variant then has the
    same name as the base metric and the two will share a registry entry.
    """

    def __init__(
        self,
        success_suffix: str = "Successes",
        failure_suffix: str = "Failures",
        separator: str = DEFAULT_SEPARATOR,
    ) -> None:
        if success_suffix == failure_suffix:
            raise ConfigurationError(
                f"Success and failure suffixes must differ, both are '{success_suffix}'"
            )
        if not separator:
            raise ConfigurationError("Name separator must not be empty")

        if not success_suffix or not failure_suffix:
            logger.warning(
                "Naming policy has an empty suffix; derived timer names will "
                "collide with their base metric name"
            )

        self._success_suffix = success_suffix
        self._failure_suffix = failure_suffix
        self._separator = separator

    def success_name(self, base: str) -> str:
        return base + self._success_suffix

    def failure_name(self, base: str) -> str:
        return base + self._failure_suffix

    @property
    def default_separator(self) -> str:
        return self._separator

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SuffixNaming):
            return NotImplemented
        return (
            self._success_suffix == other._success_suffix
            and self._failure_suffix == other._failure_suffix
            and self._separator == other._separator
        )

    def __hash__(self) -> int:
        return hash((self._success_suffix, self._failure_suffix, self._separator))

    def __repr__(self) -> str:
        return (
            f"SuffixNaming(success_suffix={self._success_suffix!r}, "
            f"failure_suffix={self._failure_suffix!r}, separator={self._separator!r})"
        )


_DEFAULT_NAMING = SuffixNaming()
