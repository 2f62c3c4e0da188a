"""
Evaluator-optimizer topology.

Generate a candidate, then alternate evaluation and refinement until the
evaluation passes the threshold or the iteration budget runs out:

    Generate -> Evaluate -> {Done | Refine -> Evaluate -> ...}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..errors import InvalidConfigError
from ..parsing import EvaluationParser, ScoreEvaluationParser
from ..prompts import TemplateLike
from ..types import Evaluation, StepResult, WorkflowResult
from .base import Workflow, check_timeout, coerce_template

if TYPE_CHECKING:
    from ..cancellation import CancellationToken

STOP_PASSED = "passed"
STOP_MAX_ITERATIONS = "max_iterations"
STOP_EVALUATION_FAILED = "evaluation_failed"
STOP_REFINEMENT_FAILED = "refinement_failed"


@dataclass(frozen=True)
class EvaluatorOptimizerConfig:
    """
    Args:
        generator: Template producing the first candidate from the task.
        evaluator: Template scoring a candidate. May reference `{task}`.
        refiner: Template improving a candidate. May reference `{task}` and
            `{feedback}`; without a `{feedback}` placeholder the feedback is
            appended to the candidate under a "Feedback:" heading.
        threshold: Minimum score that ends the loop successfully.
        max_iterations: Maximum number of evaluation rounds.
        evaluation_parser: Rule reading score and feedback from evaluation text.
        timeout: Per-step timeout overriding the executor default
    """

    generator: TemplateLike
    evaluator: TemplateLike
    refiner: TemplateLike
    threshold: float = 8.0
    max_iterations: int = 3
    evaluation_parser: EvaluationParser = field(default_factory=ScoreEvaluationParser, compare=False)
    timeout: float | None = None

    def __post_init__(self):
        for name in ("generator", "evaluator", "refiner"):
            object.__setattr__(self, name, coerce_template(getattr(self, name), name))
        if self.max_iterations < 1:
            raise InvalidConfigError("max_iterations must be at least 1", field_name="max_iterations")
        if not isinstance(self.evaluation_parser, EvaluationParser):
            raise InvalidConfigError(
                "evaluation_parser must define parse(text, threshold)",
                field_name="evaluation_parser",
            )
        parser = self.evaluation_parser
        if isinstance(parser, ScoreEvaluationParser) and not parser.score_min <= self.threshold <= parser.score_max:
            raise InvalidConfigError(
                f"threshold {self.threshold} is outside the score range "
                f"[{parser.score_min}, {parser.score_max}]",
                field_name="threshold",
            )
        check_timeout(self.timeout)


class EvaluatorOptimizerWorkflow(Workflow[EvaluatorOptimizerConfig]):
    """
    Bounded generate/evaluate/refine loop.

    At most `max_iterations` evaluations and `max_iterations - 1`
    refinements run. Only a failed generation fails the workflow; every
    other exit returns the most recent candidate:

    - passed: an evaluation reached the threshold
    - max_iterations: the budget ran out first
    - evaluation_failed / refinement_failed: a step failed, so the last
      successful candidate is returned instead of the error
    """

    pattern = "evaluator_optimizer"

    async def _execute(self, task: str, cancellation_token: CancellationToken | None) -> WorkflowResult:
        config = self.config
        timeout = self._step_timeout()
        trace: list[StepResult] = []
        evaluations: list[Evaluation] = []

        self._checkpoint(cancellation_token)
        generation = await self.executor.execute(
            config.generator.render(task),  # type: ignore[union-attr]
            timeout,
            label="generate",
        )
        trace.append(generation)
        if not generation.ok:
            return WorkflowResult(
                output=None,
                trace=tuple(trace),
                error=generation.error,
                pattern=self.pattern,
            )

        candidate = generation.text
        stop_reason = STOP_MAX_ITERATIONS

        for iteration in range(1, config.max_iterations + 1):
            self._checkpoint(cancellation_token)
            evaluation_step = await self.executor.execute(
                config.evaluator.render(candidate, task=task),  # type: ignore[union-attr]
                timeout,
                label=f"evaluate[{iteration}]",
            )
            trace.append(evaluation_step)
            if not evaluation_step.ok:
                stop_reason = STOP_EVALUATION_FAILED
                break

            evaluation = config.evaluation_parser.parse(evaluation_step.text, config.threshold)
            evaluations.append(evaluation)
            self.executor.logger.info(
                "Candidate evaluated",
                iteration=iteration,
                score=evaluation.score,
                passed=evaluation.passed,
                parsed=evaluation.parsed,
            )
            if evaluation.passed:
                stop_reason = STOP_PASSED
                break
            if iteration == config.max_iterations:
                break

            self._checkpoint(cancellation_token)
            refinement = await self.executor.execute(
                self._refinement_prompt(task, candidate, evaluation.feedback),
                timeout,
                label=f"refine[{iteration}]",
            )
            trace.append(refinement)
            if not refinement.ok:
                stop_reason = STOP_REFINEMENT_FAILED
                break
            candidate = refinement.text

        return WorkflowResult(
            output=candidate,
            trace=tuple(trace),
            pattern=self.pattern,
            metadata={
                "evaluations": [e.to_dict() for e in evaluations],
                "iterations": len(evaluations),
                "passed": bool(evaluations) and evaluations[-1].passed,
                "stop_reason": stop_reason,
            },
        )

    def _refinement_prompt(self, task: str, candidate: str, feedback: str) -> str:
        refiner = self.config.refiner
        if refiner.references("feedback"):  # type: ignore[union-attr]
            return refiner.render(candidate, task=task, feedback=feedback)  # type: ignore[union-attr]
        return refiner.render(f"{candidate}\n\nFeedback:\n{feedback}", task=task)  # type: ignore[union-attr]


__all__ = [
    "EvaluatorOptimizerConfig",
    "EvaluatorOptimizerWorkflow",
    "STOP_PASSED",
    "STOP_MAX_ITERATIONS",
    "STOP_EVALUATION_FAILED",
    "STOP_REFINEMENT_FAILED",
]
