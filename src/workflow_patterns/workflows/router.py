"""Router topology: classify once, then run exactly one matching route."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..errors import InvalidConfigError
from ..prompts import PromptTemplate, TemplateLike
from ..types import StepResult, WorkflowResult
from .base import Workflow, check_timeout, coerce_template

if TYPE_CHECKING:
    from ..cancellation import CancellationToken

DEFAULT_ROUTE = "default"


def normalize_label(text: str) -> str:
    """Trim and lowercase a route label or classification output."""
    return text.strip().lower()


@dataclass(frozen=True)
class RouterConfig:
    """
    Args:
        classifier: Classification template. May reference `{routes}`, the
            comma-separated list of known labels.
        routes: Label to route template. Labels are normalized with
            `normalizer` at construction and must stay unique.
        default_route: Template run when the classification matches no label.
        normalizer: Normalization applied to labels and classification output.
        timeout: Per-step timeout overriding the executor default
    """

    classifier: TemplateLike
    routes: Mapping[str, TemplateLike]
    default_route: TemplateLike
    normalizer: Callable[[str], str] = field(default=normalize_label, compare=False)
    timeout: float | None = None

    def __post_init__(self):
        object.__setattr__(self, "classifier", coerce_template(self.classifier, "classifier"))
        object.__setattr__(self, "default_route", coerce_template(self.default_route, "default_route"))

        table: dict[str, PromptTemplate] = {}
        for label, template in self.routes.items():
            key = self.normalizer(label)
            if not key:
                raise InvalidConfigError("Route labels must not be empty", field_name="routes")
            if key in table:
                raise InvalidConfigError(
                    f"Duplicate route label after normalization: {key!r}",
                    field_name="routes",
                )
            table[key] = coerce_template(template, f"routes[{label!r}]")
        object.__setattr__(self, "routes", table)
        check_timeout(self.timeout)

    @property
    def labels(self) -> list[str]:
        return list(self.routes)

    def resolve(self, classification: str) -> tuple[str, PromptTemplate, bool]:
        """Return (label, template, is_fallback) for a classification output."""
        key = self.normalizer(classification)
        template = self.routes.get(key)  # type: ignore[union-attr]
        if template is None:
            return DEFAULT_ROUTE, self.default_route, True  # type: ignore[return-value]
        return key, template, False


class RouterWorkflow(Workflow[RouterConfig]):
    """
    One classification step followed by zero or one specialist step.

    An unrecognized classification is not an error: the default route
    runs instead. Only a failed classification step fails the workflow.
    """

    pattern = "router"

    async def _execute(self, input: str, cancellation_token: CancellationToken | None) -> WorkflowResult:
        config = self.config
        timeout = self._step_timeout()
        trace: list[StepResult] = []

        self._checkpoint(cancellation_token)
        classification = await self.executor.execute(
            config.classifier.render(input, routes=", ".join(config.labels)),  # type: ignore[union-attr]
            timeout,
            label="classify",
        )
        trace.append(classification)
        if not classification.ok:
            return WorkflowResult(
                output=None,
                trace=tuple(trace),
                error=classification.error,
                pattern=self.pattern,
            )

        label, template, fallback = config.resolve(classification.text)
        if fallback:
            self.executor.logger.info(
                "Classification matched no route, using default",
                classification=classification.text.strip(),
            )

        self._checkpoint(cancellation_token)
        routed = await self.executor.execute(
            template.render(input, route=label),
            timeout,
            label=f"route:{label}",
        )
        trace.append(routed)

        return WorkflowResult(
            output=routed.text,
            trace=tuple(trace),
            error=routed.error,
            pattern=self.pattern,
            metadata={
                "route": label,
                "classification": config.normalizer(classification.text),
                "fallback": fallback,
            },
        )


__all__ = ["DEFAULT_ROUTE", "normalize_label", "RouterConfig", "RouterWorkflow"]
