"""Typed handles around native registry metrics.

A handle pairs the flattened identifier a monitor computed with the native
Prometheus object the registry holds for it. Handles are immutable and
compare equal when their names are equal, whichever monitor produced them.
"""

import time
from collections.abc import Callable
from datetime import timedelta
from typing import Any, Generic, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def _sample_value(native: Any, suffix: str) -> float:
    """Read a single unlabelled sample from a Prometheus metric."""
    for family in native.collect():
        for sample in family.samples:
            if sample.name == family.name + suffix:
                return sample.value
    return 0.0


def _seconds(duration: float | timedelta) -> float:
    if isinstance(duration, timedelta):
        return duration.total_seconds()
    return float(duration)


class Metric:
    """Base class for metric handles."""

    def __init__(self, name: str, native: Any) -> None:
        self._name = name
        self._native = native

    @property
    def name(self) -> str:
        return self._name

    @property
    def native(self) -> Any:
        return self._native

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Metric):
            return NotImplemented
        return self._name == other._name

    def __hash__(self) -> int:
        return hash(self._name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._name!r})"


class Meter(Metric):
    """Marks occurrences of an event; rates are derived by Prometheus."""

    def mark(self, n: int = 1) -> None:
        self._native.inc(n)

    @property
    def count(self) -> int:
        return int(_sample_value(self._native, "_total"))


class Counter(Metric):
    """Counter that can be incremented and decremented."""

    def inc(self, n: int = 1) -> None:
        self._native.inc(n)

    def dec(self, n: int = 1) -> None:
        self._native.dec(n)

    @property
    def count(self) -> int:
        return int(_sample_value(self._native, ""))


class Histogram(Metric):
    """Records the distribution of arbitrary values."""

    def update(self, value: float) -> None:
        self._native.observe(value)

    @property
    def count(self) -> int:
        return int(_sample_value(self._native, "_count"))

    @property
    def sum(self) -> float:
        return _sample_value(self._native, "_sum")


class Gauge(Metric, Generic[T]):
    """Reports the current value of a supplier each time it is sampled."""

    @property
    def value(self) -> T:
        return self._native.get_value()


class TimeContext:
    """A running measurement of a single timer.

    Usable as a context manager. Only the first stop() records a duration.
    """

    def __init__(self, timer: "Timer") -> None:
        self._timer = timer
        self._start = time.perf_counter()
        self._elapsed: float | None = None

    def stop(self) -> float:
        """Stop the measurement and return the elapsed seconds."""
        if self._elapsed is None:
            self._elapsed = time.perf_counter() - self._start
            self._timer.update(self._elapsed)
        return self._elapsed

    def __enter__(self) -> "TimeContext":
        return self

    def __exit__(self, exc_type: Any, exc_value: Any, traceback: Any) -> None:
        self.stop()


class Timer(Metric):
    """Measures durations in seconds."""

    def start(self) -> TimeContext:
        return TimeContext(self)

    def update(self, duration: float | timedelta) -> None:
        self._native.observe(_seconds(duration))

    def time(self, operation: Callable[..., R], *args: Any, **kwargs: Any) -> R:
        """Run the operation and record how long it took, even if it raises."""
        with self.start():
            return operation(*args, **kwargs)

    @property
    def count(self) -> int:
        return int(_sample_value(self._native, "_count"))

    @property
    def sum(self) -> float:
        return _sample_value(self._native, "_sum")


class TimerPairContext:
    """A running measurement recorded on either timer of a pair.

    As a context manager it records a failure when the block raises and a
    success otherwise. Only the first stop records a duration.
    """

    def __init__(self, pair: "TimerPair") -> None:
        self._pair = pair
        self._start = time.perf_counter()
        self._elapsed: float | None = None

    def stop(self) -> float:
        return self._stop(self._pair.success)

    def stop_failure(self) -> float:
        return self._stop(self._pair.failure)

    def _stop(self, timer: Timer) -> float:
        if self._elapsed is None:
            self._elapsed = time.perf_counter() - self._start
            timer.update(self._elapsed)
        return self._elapsed

    def __enter__(self) -> "TimerPairContext":
        return self

    def __exit__(self, exc_type: Any, exc_value: Any, traceback: Any) -> None:
        if exc_type is None:
            self.stop()
        else:
            self.stop_failure()


class TimerPair:
    """Two independent timers for successful and failed executions."""

    def __init__(self, success: Timer, failure: Timer) -> None:
        self._success = success
        self._failure = failure

    @property
    def success(self) -> Timer:
        return self._success

    @property
    def failure(self) -> Timer:
        return self._failure

    def start(self) -> TimerPairContext:
        return TimerPairContext(self)

    def update(self, duration: float | timedelta) -> None:
        self._success.update(duration)

    def update_failure(self, duration: float | timedelta) -> None:
        self._failure.update(duration)

    def time(self, operation: Callable[..., R], *args: Any, **kwargs: Any) -> R:
        """Run the operation, timing it as a success or, if it raises, a failure."""
        with self.start():
            return operation(*args, **kwargs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimerPair):
            return NotImplemented
        return self._success == other._success and self._failure == other._failure

    def __hash__(self) -> int:
        return hash((self._success, self._failure))

    def __repr__(self) -> str:
        return f"TimerPair({self._success.name!r}, {self._failure.name!r})"
