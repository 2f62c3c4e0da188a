"""
Instruction templates and prompt composition.

A template is an instruction that gets combined with the current input
(and, for some topologies, extra named context) to form the prompt of one
step. Placeholders use `{name}` syntax and are substituted literally, so
braces elsewhere in the instruction are left alone.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

_PLACEHOLDER = re.compile(r"\{([a-zA-Z_][a-zA-Z0-9_]*)\}")


@dataclass(frozen=True)
class PromptTemplate:
    """
    An instruction with optional input placeholder and suffix.

    Rendering rules:
    - `{input}` is replaced with the step input. If the instruction has no
      `{input}` placeholder, the input is appended after the instruction
      separated by `separator`.
    - Other `{name}` placeholders are replaced from the keyword context;
      context keys the instruction does not reference are ignored.
    - `suffix`, when set, is appended last.
    """

    instruction: str
    suffix: str = ""
    separator: str = "\n\n"
    name: str | None = None

    @property
    def placeholders(self) -> frozenset[str]:
        return frozenset(_PLACEHOLDER.findall(self.instruction + self.suffix))

    def references(self, key: str) -> bool:
        return key in self.placeholders

    def render(self, input: str = "", **context: str) -> str:
        values = {key: str(value) for key, value in context.items()}
        values["input"] = input

        def _sub(text: str) -> str:
            return _PLACEHOLDER.sub(
                lambda m: values.get(m.group(1), m.group(0)),
                text,
            )

        body = _sub(self.instruction)
        if not self.references("input") and input:
            body = f"{body}{self.separator}{input}" if body else input
        if self.suffix:
            body = f"{body}{self.separator}{_sub(self.suffix)}"
        return body


TemplateLike = Union[PromptTemplate, str]


def as_template(value: TemplateLike) -> PromptTemplate:
    """Coerce a plain instruction string into a `PromptTemplate`."""
    if isinstance(value, PromptTemplate):
        return value
    if isinstance(value, str):
        return PromptTemplate(value)
    raise TypeError(f"Expected PromptTemplate or str, got {type(value).__name__}")


__all__ = ["PromptTemplate", "TemplateLike", "as_template"]
