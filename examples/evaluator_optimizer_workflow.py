#!/usr/bin/env python3
"""
Example: Evaluator-Optimizer Workflow

Demonstrates:
1. Generating a candidate, scoring it, and refining it in a bounded loop
2. Reading scores with ScoreEvaluationParser
3. Inspecting evaluation history and the stop reason
"""
import asyncio
import sys
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from workflow_patterns import OpenAICompletion, WorkflowEngine

GENERATOR = "Implement the following in Python. Return only code."

EVALUATOR = """Evaluate the code below for the task "{task}".
Check correctness, time complexity and readability.

Start your reply with a score from 0 to 10, then give concrete feedback.

{input}"""

REFINER = """Improve the code for the task "{task}" using the reviewer feedback.
Return only the improved code.

Code:
{input}

Feedback:
{feedback}"""

TASK = """Implement a Stack with:
1. push(x)
2. pop()
3. getMin()
All operations should be O(1)."""


async def main():
    print("=" * 60)
    print("EVALUATOR-OPTIMIZER EXAMPLE")
    print("=" * 60)

    async with OpenAICompletion(model="gpt-4o-mini") as completion:
        engine = WorkflowEngine(completion)
        result = await engine.run_evaluator_optimizer(
            GENERATOR,
            EVALUATOR,
            REFINER,
            TASK,
            threshold=8,
            max_iterations=3,
        )

    for i, evaluation in enumerate(result.metadata.get("evaluations", []), start=1):
        print(f"\nRound {i}: score={evaluation['score']:.1f} passed={evaluation['passed']}")
        print(f"  {evaluation['feedback'][:200]}")

    print(f"\nStop reason: {result.metadata.get('stop_reason')}")
    print("\n" + "=" * 40)
    print(result.output if result.ok else f"Generation failed: {result.error.value}")


if __name__ == "__main__":
    asyncio.run(main())
