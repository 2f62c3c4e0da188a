#!/usr/bin/env python3
"""
Example: Chain Workflow

Demonstrates:
1. Running a fixed sequence of steps, each fed the previous output
2. Referencing the original input with {original}
3. Inspecting the per-step trace
"""
import asyncio
import sys
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from workflow_patterns import OpenAICompletion, PromptTemplate, WorkflowEngine

REPORT = """
Q3 Performance Summary:
Our customer satisfaction score rose to 92 points this quarter.
Revenue grew by 45% compared to last year.
Market share is now at 23% in our primary market.
Customer churn decreased to 5% from 8%.
Operating margin improved to 34%.
"""

STEPS = [
    "Extract only the numerical values and their associated metrics from the text. "
    "Format each as 'value: metric' on a new line.",
    "Convert all numerical values to percentages where possible. "
    "If not a percentage or points, convert to a decimal. Keep one number per line.",
    "Sort all lines in descending order by numerical value.",
    PromptTemplate(
        "Format the sorted data as a markdown table with columns Metric and Value:\n\n{input}",
        suffix="Use only metrics that appear in the original report:\n{original}",
    ),
]


async def main():
    print("=" * 60)
    print("CHAIN WORKFLOW EXAMPLE")
    print("=" * 60)

    async with OpenAICompletion(model="gpt-4o-mini") as completion:
        engine = WorkflowEngine(completion)
        result = await engine.run_chain(STEPS, REPORT)

    for step in result.trace:
        status = "OK" if step.ok else f"FAILED ({step.error.value})"
        print(f"\n--- {step.label}: {status} ---")
        print(step.text or step.message)

    print("\n" + "=" * 40)
    if result.ok:
        print(result.output)
    else:
        print(f"Chain stopped at step {result.metadata['failed_step']}: {result.error.value}")


if __name__ == "__main__":
    asyncio.run(main())
