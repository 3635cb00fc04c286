#!/usr/bin/env python3
"""Demo script timing an operation that completes on the event loop."""

import asyncio

from benchly import Benchmark


def schedule_soon(deferred):
    """Resolve on the next loop iteration, like a completed I/O callback."""
    asyncio.get_running_loop().call_soon(deferred.resolve)


async def main():
    """Time a deferred operation and an asynchronous one side by side."""
    deferred = Benchmark("call_soon", schedule_soon, defer=True, max_time=1)
    plain = Benchmark("noop", lambda: None, asynchronous=True, max_time=1)

    for bench in (deferred, plain):
        await bench.run_async()
        print(bench)

    verdict = {1: "faster", -1: "slower", 0: "indistinguishable"}[deferred.compare(plain)]
    print(f"\n{deferred.name} is {verdict} than {plain.name}")


if __name__ == "__main__":
    asyncio.run(main())
