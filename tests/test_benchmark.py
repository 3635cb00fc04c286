"""Tests for the Benchmark lifecycle."""

import asyncio
import math

import pytest
from pydantic import ValidationError

from benchly.benchmarks.base import Benchmark
from benchly.models.options import BenchmarkOptions


def _bench(calibrator, fn, **options):
    options = {"min_time": 0.01, "max_time": 0.05, "min_samples": 3, **options}
    return Benchmark("unit", fn, calibrator=calibrator, **options)


def _record(bench, types="start cycle abort error reset complete"):
    events = []
    bench.on(types, lambda event: events.append(event.type))
    return events


def test_run_emits_start_cycles_complete(calibrator, unit_op):
    """Test the event sequence of a successful run."""
    bench = _bench(calibrator, unit_op)
    events = _record(bench, "start cycle complete")

    result = bench.run()

    assert result is bench
    assert events[0] == "start"
    assert events[-1] == "complete"
    assert events.count("start") == 1
    assert events.count("complete") == 1
    assert "cycle" in events
    assert bench.hz == pytest.approx(1000)
    assert "ops/sec" in str(bench)


def test_operation_error_is_captured(calibrator):
    """Test a raising operation never escapes run() and aborts the benchmark."""

    def failing():
        raise ValueError("boom")

    bench = _bench(calibrator, failing)
    messages = []
    bench.on("error", lambda event: messages.append(event.message))
    events = _record(bench, "abort complete")

    bench.run()

    assert isinstance(bench.error, ValueError)
    assert messages == [bench.error]
    assert events == ["abort", "complete"]
    assert bench.aborted
    assert not bench.running
    assert "boom" in str(bench)


def test_cancelling_error_keeps_running(calibrator):
    """Test a cancelled error event does not abort the benchmark."""

    def failing():
        raise ValueError("boom")

    bench = _bench(calibrator, failing)
    bench.on("error", lambda event: False)

    bench.run()

    assert isinstance(bench.error, ValueError)
    assert not bench.aborted
    assert not bench.running


def test_cancelled_error_is_emitted_once(calibrator):
    """Test the original sees one error event while the failed clone keeps cycling."""

    def failing():
        raise ValueError("boom")

    bench = _bench(calibrator, failing)
    seen = []

    def cancel(event):
        seen.append(event.message)
        return False

    bench.on("error", cancel)
    bench.run()

    assert seen == [bench.error]
    assert bench.cycles > 1
    assert not bench.aborted


def test_abort_is_idempotent(calibrator, unit_op):
    """Test a second abort() during the same run does nothing."""
    bench = _bench(calibrator, unit_op)
    events = _record(bench, "abort complete")

    def stop(event):
        bench.abort()
        bench.abort()

    bench.on("cycle", stop)
    bench.run()

    assert events == ["abort", "complete"]
    assert bench.aborted
    assert not bench.running
    assert bench.stats.size == 0

    # Not running: nothing happens
    bench.abort()
    assert events == ["abort", "complete"]


def test_abort_from_cycle_event(calibrator, unit_op):
    """Test setting event.aborted on a cycle event aborts the run."""
    bench = _bench(calibrator, unit_op)

    def stop(event):
        event.aborted = True

    bench.on("cycle", stop)
    bench.run()

    assert bench.aborted
    assert not bench.running


def test_cancelled_abort(calibrator, unit_op):
    """Test an abort listener returning False keeps the benchmark running."""
    bench = _bench(calibrator, unit_op)
    bench.on("abort", lambda event: False)
    attempts = []

    def try_stop(event):
        if not attempts:
            attempts.append(bench.abort())

    bench.on("cycle", try_stop)
    bench.run()

    assert attempts == [bench]
    assert not bench.aborted
    assert bench.stats.size >= 3


def test_cancelled_start(calibrator, unit_op):
    """Test a start listener returning False skips the run."""
    bench = _bench(calibrator, unit_op)
    bench.on("start", lambda event: False)
    events = _record(bench, "cycle complete")

    bench.run()

    assert events == []
    assert not bench.running
    assert bench.stats.size == 0


def test_reset_restores_defaults(calibrator, unit_op):
    """Test reset() clears results and emits only when something changed."""
    bench = _bench(calibrator, unit_op)
    bench.run()
    events = _record(bench, "reset")

    bench.reset()
    bench.reset()

    assert events == ["reset"]
    assert bench.hz == 0
    assert bench.count == 0
    assert bench.cycles == 0
    assert bench.stats.size == 0
    assert bench.times.period == 0


def test_cancelled_reset(calibrator, unit_op):
    """Test a reset listener returning False keeps the results."""
    bench = _bench(calibrator, unit_op)
    bench.run()
    bench.on("reset", lambda event: False)

    bench.reset()

    assert bench.stats.size >= 3
    assert bench.hz > 0


def test_run_async(calibrator, unit_op):
    """Test an asynchronous benchmark on the event loop."""
    bench = _bench(calibrator, unit_op, asynchronous=True, delay=0)
    events = _record(bench, "start complete")

    asyncio.run(bench.run_async())

    assert events == ["start", "complete"]
    assert bench.stats.size >= 3
    assert bench.hz == pytest.approx(1000)


def test_abort_while_waiting_on_delay(calibrator, unit_op):
    """Test abort() wakes a benchmark suspended between cycles."""
    bench = _bench(calibrator, unit_op, asynchronous=True, delay=60, max_time=10)

    async def scenario():
        task = asyncio.ensure_future(bench.run_async())
        for _ in range(5):
            await asyncio.sleep(0)
        bench.abort()
        await asyncio.wait_for(task, timeout=5)

    asyncio.run(scenario())

    assert bench.aborted
    assert not bench.running


def test_clone(calibrator, unit_op):
    """Test clone() copies the operation, options and listeners, not results."""
    bench = _bench(calibrator, unit_op)
    seen = []
    bench.on("complete", lambda event: seen.append(event.target))
    bench.run()

    copy = bench.clone(max_time=0.02)

    assert copy is not bench
    assert copy.fn is bench.fn
    assert copy.name == bench.name
    assert copy.id == bench.id
    assert copy.max_time == 0.02
    assert copy.min_time == bench.min_time
    assert copy.stats.size == 0
    assert copy.original is None

    copy.run()
    assert seen == [bench, copy]


def test_ids_and_display_name(unit_op):
    """Test automatic ids are unique and unnamed benchmarks get a label."""
    first = Benchmark(fn=unit_op)
    second = Benchmark(fn=unit_op)
    named = Benchmark("named", unit_op, id="custom")

    assert first.id != second.id
    assert first.display_name == f"<Test #{first.id}>"
    assert named.id == "custom"
    assert named.display_name == "named"


def test_invalid_arguments(unit_op):
    """Test construction-time validation."""
    with pytest.raises(TypeError):
        Benchmark("no function")
    with pytest.raises(ValidationError):
        Benchmark("bad", unit_op, init_count=0)
    with pytest.raises(ValidationError):
        Benchmark("bad", unit_op, max_time=-1)
    with pytest.raises(ValidationError):
        Benchmark("bad", unit_op, unknown_option=True)


def test_options_object_and_listeners(calibrator, unit_op):
    """Test options given as a model, with listener options registered."""
    seen = []
    options = BenchmarkOptions(
        name="from options",
        min_time=0.01,
        max_time=0.02,
        on_complete=lambda event: seen.append(event.type),
    )

    bench = Benchmark(fn=unit_op, options=options, calibrator=calibrator)
    bench.run()

    assert bench.name == "from options"
    assert seen == ["complete"]
    assert math.isfinite(bench.hz)


def test_options_read_environment(monkeypatch, unit_op):
    """Test numeric defaults come from BENCHLY_* variables."""
    monkeypatch.setenv("BENCHLY_MAX_TIME", "2.5")
    monkeypatch.setenv("BENCHLY_MIN_SAMPLES", "7")

    bench = Benchmark("env", unit_op)

    assert bench.max_time == 2.5
    assert bench.min_samples == 7
    assert Benchmark("explicit", unit_op, max_time=1).max_time == 1
