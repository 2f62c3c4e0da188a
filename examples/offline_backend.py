#!/usr/bin/env python3
"""
Example: Custom Backends, Hooks and Sync Wrappers

Demonstrates:
1. Driving workflows with a plain function instead of a provider
2. Collecting step metrics with InMemoryMetricsHook
3. Calling the sync wrappers from a script
4. Cancelling a fan-out with a CancellationToken
"""
import asyncio
import sys
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from workflow_patterns import CancellationToken, CancelledError, InMemoryMetricsHook, WorkflowEngine
from workflow_patterns.sync import run_chain_sync


def echo_backend(prompt: str) -> str:
    """Deterministic stand-in for a model: returns the last line, uppercased."""
    return prompt.strip().splitlines()[-1].upper()


async def slow_backend(prompt: str) -> str:
    await asyncio.sleep(10)
    return prompt


async def cancel_example():
    engine = WorkflowEngine(slow_backend)
    token = CancellationToken()

    task = asyncio.create_task(
        engine.run_parallel(["A:", "B:", "C:"], "input", cancellation_token=token)
    )
    await asyncio.sleep(0.1)
    token.cancel()
    try:
        await task
    except CancelledError:
        print("Parallel run cancelled; no branch left running")


def main():
    print("=" * 60)
    print("CUSTOM BACKEND EXAMPLE")
    print("=" * 60)

    metrics = InMemoryMetricsHook()
    engine = WorkflowEngine(echo_backend, hooks=[metrics])

    result = run_chain_sync(engine, ["Step one:", "Step two:"], "hello workflows")
    print(f"\nOutput: {result.output}")
    print(f"Fingerprint: {result.fingerprint()[:16]}")
    print(f"Metrics: {metrics.snapshot()['counters']}")

    asyncio.run(cancel_example())


if __name__ == "__main__":
    main()
