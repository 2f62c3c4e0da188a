#!/usr/bin/env python3
"""
Example: Parallel Workflow

Demonstrates:
1. Fanning out independent prompts over the same input
2. Per-branch results in step order
3. Handling failed branches without losing the others
"""
import asyncio
import sys
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from workflow_patterns import OpenAICompletion, WorkflowEngine

STAKEHOLDERS = ["Customers", "Employees", "Investors", "Suppliers"]

CHANGE = "The company is moving its entire product line to a subscription model next quarter."


async def main():
    print("=" * 60)
    print("PARALLEL WORKFLOW EXAMPLE")
    print("=" * 60)

    steps = [
        f"Analyze how this market change affects {group}. "
        "List the main impacts and recommend specific actions."
        for group in STAKEHOLDERS
    ]

    async with OpenAICompletion(model="gpt-4o-mini") as completion:
        engine = WorkflowEngine(completion)
        result = await engine.run_parallel(steps, CHANGE, timeout=45)

    for group, branch in zip(STAKEHOLDERS, result.output):
        print(f"\n--- {group} ---")
        print(branch.text if branch.ok else f"[failed: {branch.error.value}] {branch.message}")

    if result.metadata["failed_branches"]:
        print(f"\nFailed branches: {result.metadata['failed_branches']}")


if __name__ == "__main__":
    asyncio.run(main())
