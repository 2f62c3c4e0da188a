#!/usr/bin/env python3
"""
Example: Orchestrator-Workers Workflow

Demonstrates:
1. Decomposing a task into subtasks with one completion call
2. Running one worker per subtask with bounded concurrency
3. Combining worker outputs, with placeholders for failed workers
4. Parsing XML-style decompositions with TagSubtaskParser
"""
import asyncio
import sys
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from workflow_patterns import OpenAICompletion, TagSubtaskParser, WorkflowEngine

DECOMPOSER = """Analyze this task and break it down into 2-3 distinct approaches.

Return each approach as:
<task>
<type>short name</type>
<description>what this approach should produce</description>
</task>

Task:"""

WORKER = """Write content for the task "{task}" following this approach:

{input}

Return only the content."""

COMBINER = """Combine the drafts below into one recommendation for "{task}".
Point out what each approach does best, then give the final version.

{input}"""


async def main():
    print("=" * 60)
    print("ORCHESTRATOR-WORKERS EXAMPLE")
    print("=" * 60)

    task = "Write a product description for a new eco-friendly water bottle"

    async with OpenAICompletion(model="gpt-4o-mini") as completion:
        engine = WorkflowEngine(completion)
        result = await engine.run_orchestrator(
            DECOMPOSER,
            WORKER,
            COMBINER,
            task,
            max_concurrency=2,
            subtask_parser=TagSubtaskParser("task"),
        )

    print("\nSubtasks:")
    for subtask in result.metadata["subtasks"]:
        print(f"  {subtask['id']}. {subtask['description']}")
    if result.metadata["failed_workers"]:
        print(f"Failed workers: {result.metadata['failed_workers']}")

    print("\n" + "=" * 40)
    print(result.output if result.ok else f"Workflow failed: {result.error.value}")


if __name__ == "__main__":
    asyncio.run(main())
