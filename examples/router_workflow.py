#!/usr/bin/env python3
"""
Example: Router Workflow

Demonstrates:
1. Classifying input with one completion call
2. Dispatching to exactly one specialist prompt
3. Falling back to a default route for unknown labels
"""
import asyncio
import sys
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from workflow_patterns import OpenAICompletion, WorkflowEngine

CLASSIFIER = (
    "Classify the support ticket into exactly one of these teams: {routes}. "
    "Reply with the team name only."
)

ROUTES = {
    "billing": "You are a billing support specialist. Acknowledge the billing issue, "
    "explain the charges and list the next steps to resolve it.",
    "technical": "You are a technical support engineer. Give clear numbered steps to "
    "fix the problem and mention how to verify the fix.",
    "account": "You are an account security specialist. Prioritize account security "
    "and explain how to recover access safely.",
}

DEFAULT = "You are a helpful support agent. Answer the ticket politely and ask for any missing details."

TICKETS = [
    "I was charged twice for my subscription this month.",
    "The app crashes every time I upload a file larger than 10MB.",
    "Someone changed my password and I can't log in.",
    "Do you have a student discount?",
]


async def main():
    print("=" * 60)
    print("ROUTER WORKFLOW EXAMPLE")
    print("=" * 60)

    async with OpenAICompletion(model="gpt-4o-mini") as completion:
        engine = WorkflowEngine(completion)
        for ticket in TICKETS:
            result = await engine.run_router(CLASSIFIER, ROUTES, DEFAULT, ticket)

            print(f"\nTicket: {ticket}")
            if not result.ok:
                print(f"Routing failed: {result.error.value}")
                continue
            fallback = " (fallback)" if result.metadata["fallback"] else ""
            print(f"Route: {result.metadata['route']}{fallback}")
            print(result.output)


if __name__ == "__main__":
    asyncio.run(main())
