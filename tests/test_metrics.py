"""Tests for metric handles and timing contexts."""

from datetime import timedelta
from unittest.mock import patch

import pytest

from metrics_monitor.metrics import Counter, Meter, TimerPair
from metrics_monitor.monitor import Monitor
from metrics_monitor.registry import MetricRegistry
from tests.testing_utils import sample_value


class TestHandles:
    """Tests for basic handle behaviour."""

    def test_equality_by_name(self, registry: MetricRegistry) -> None:
        """Test handles compare and hash by name only."""
        native = registry.counter("a")

        assert Counter("a", native) == Counter("a", native)
        assert Counter("a", native) != Counter("b", native)
        assert Counter("a", native) == Meter("a", object())
        assert len({Counter("a", native), Counter("a", native)}) == 1

    def test_exposes_name_and_native(self, monitor: Monitor) -> None:
        """Test handles expose their identifier and native metric."""
        counter = monitor.named("x").new_counter("y")

        assert counter.name == "x/y"
        assert counter.native is monitor.registry.get_metric("x/y")
        assert repr(counter) == "Counter('x/y')"

    def test_counter_inc_dec(self, monitor: Monitor) -> None:
        """Test counters go up and down."""
        counter = monitor.new_counter("active")

        counter.inc()
        counter.inc(4)
        counter.dec(2)

        assert counter.count == 3

    def test_meter_mark(self, monitor: Monitor, registry: MetricRegistry) -> None:
        """Test meters count marks."""
        meter = monitor.new_meter("requests")

        meter.mark()
        meter.mark(2)

        assert meter.count == 3
        assert sample_value(registry, "requests_total") == 3.0

    def test_histogram_update(self, monitor: Monitor) -> None:
        """Test histograms track count and sum."""
        histogram = monitor.new_histogram("payload")

        histogram.update(10)
        histogram.update(32)

        assert histogram.count == 2
        assert histogram.sum == 42.0

    def test_gauge_value_calls_supplier(self, monitor: Monitor) -> None:
        """Test gauge value invokes the supplier each time."""
        state = {"value": "starting"}
        gauge = monitor.new_gauge("state", lambda: state["value"])

        assert gauge.value == "starting"
        state["value"] = "running"
        assert gauge.value == "running"


class TestTimer:
    """Tests for timers and their contexts."""

    def test_update_accepts_seconds_and_timedelta(self, monitor: Monitor) -> None:
        """Test timers accept seconds or a timedelta."""
        timer = monitor.new_timer("latency")

        timer.update(0.5)
        timer.update(timedelta(milliseconds=250))

        assert timer.count == 2
        assert timer.sum == pytest.approx(0.75)

    def test_start_stop(self, monitor: Monitor) -> None:
        """Test a timing context records the elapsed time."""
        timer = monitor.new_timer("latency")

        with patch("metrics_monitor.metrics.time.perf_counter", side_effect=[10.0, 12.5]):
            context = timer.start()
            elapsed = context.stop()

        assert elapsed == 2.5
        assert timer.count == 1
        assert timer.sum == 2.5

    def test_stop_records_once(self, monitor: Monitor) -> None:
        """Test a timing context records only once."""
        timer = monitor.new_timer("latency")

        with timer.start() as context:
            pass
        first = context.stop()
        second = context.stop()

        assert first == second
        assert timer.count == 1

    def test_time_returns_result(self, monitor: Monitor) -> None:
        """Test Timer.time passes arguments and returns the result."""
        timer = monitor.new_timer("latency")

        result = timer.time(lambda a, b=0: a + b, 1, b=2)

        assert result == 3
        assert timer.count == 1

    def test_time_records_when_operation_raises(self, monitor: Monitor) -> None:
        """Test Timer.time records even when the call raises."""
        timer = monitor.new_timer("latency")

        def fail() -> None:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            timer.time(fail)

        assert timer.count == 1


class TestTimerPairHandle:
    """Tests for timer pair recording."""

    def _pair(self, monitor: Monitor) -> TimerPair:
        return monitor.named("db").new_timer_pair("select")

    def test_time_success(self, monitor: Monitor) -> None:
        """Test a returning call is recorded as success."""
        pair = self._pair(monitor)

        assert pair.time(lambda: "rows") == "rows"

        assert pair.success.count == 1
        assert pair.failure.count == 0

    def test_time_failure_reraises(self, monitor: Monitor) -> None:
        """Test a raising call is recorded as failure and re-raised."""
        pair = self._pair(monitor)

        def fail() -> None:
            raise ValueError("bad query")

        with pytest.raises(ValueError, match="bad query"):
            pair.time(fail)

        assert pair.success.count == 0
        assert pair.failure.count == 1

    def test_context_manager_records_failure_on_exception(
        self, monitor: Monitor
    ) -> None:
        """Test the pair context records failure when the block raises."""
        pair = self._pair(monitor)

        with pytest.raises(KeyError):
            with pair.start():
                raise KeyError("missing")

        with pair.start():
            pass

        assert pair.success.count == 1
        assert pair.failure.count == 1

    def test_explicit_stop_failure(self, monitor: Monitor) -> None:
        """Test stop_failure records a failure and ends the context."""
        pair = self._pair(monitor)

        context = pair.start()
        context.stop_failure()
        context.stop()

        assert pair.success.count == 0
        assert pair.failure.count == 1

    def test_update(self, monitor: Monitor) -> None:
        """Test direct success and failure updates."""
        pair = self._pair(monitor)

        pair.update(1.0)
        pair.update_failure(timedelta(seconds=2))

        assert pair.success.sum == 1.0
        assert pair.failure.sum == 2.0

    def test_equality(self, monitor: Monitor) -> None:
        """Test timer pairs compare by their timer names."""
        assert self._pair(monitor) == monitor.named("db").new_timer_pair("select")
        assert repr(self._pair(monitor)) == (
            "TimerPair('db/selectSuccesses', 'db/selectFailures')"
        )
