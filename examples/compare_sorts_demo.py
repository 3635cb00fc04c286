#!/usr/bin/env python3
"""Demo script comparing sorting approaches with a benchmark suite."""

import heapq
import json
import random

from benchly import Calibrator, Suite
from benchly.utils.logger import Logger


def main():
    """Run a small suite and report the fastest approach."""
    Logger.configure_from_env()

    print("=" * 60)
    print("Sorting Comparison Demo")
    print("=" * 60)
    print()

    data = [random.random() for _ in range(1_000)]
    calibrator = Calibrator.select()
    print(f"Clock: {calibrator.source.name} (resolution {calibrator.resolution():.3e}s)")
    print(f"Minimum region: {calibrator.minimum_run_duration():.3f}s\n")

    suite = Suite("sorting", calibrator=calibrator)
    suite.add("sorted", lambda: sorted(data), max_time=1)
    suite.add("list.sort", lambda: list(data).sort(), max_time=1)
    suite.add("heapq", lambda: heapq.nsmallest(len(data), data), max_time=1)

    suite.on("cycle", lambda event: print(f"  {event.target}"))
    suite.on("error", lambda event: print(f"  {event.target.name} failed: {event.message}"))

    print("Running...")
    suite.run()

    fastest = [bench.name for bench in suite.filter("fastest")]
    print(f"\nFastest: {', '.join(fastest)}")

    # Stats are pydantic models, so they serialize directly
    print("\n" + "=" * 60)
    print("JSON Output:")
    print("=" * 60)
    results = {
        bench.name: bench.stats.model_dump(exclude={"sample"}) | {"hz": bench.hz}
        for bench in suite
    }
    print(json.dumps(results, indent=2))


if __name__ == "__main__":
    main()
