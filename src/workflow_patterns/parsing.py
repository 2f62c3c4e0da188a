"""
Parsing rules for free-text model output.

Two places in the engine depend on the shape of generated text: splitting
a decomposition into subtasks, and reading a score out of an evaluation.
Model output is not guaranteed to follow any format, so both rules are
pluggable and both have a defined fallback instead of failing.
"""

from __future__ import annotations

import re
from typing import Protocol, runtime_checkable

from .types import Evaluation, Subtask

# =============================================================================
# Subtask parsing
# =============================================================================


@runtime_checkable
class SubtaskParser(Protocol):
    """Turns decomposition text into an ordered list of subtasks."""

    def parse(self, text: str) -> list[Subtask]:
        ...


def _to_subtasks(descriptions: list[str]) -> list[Subtask]:
    cleaned = [d.strip() for d in descriptions]
    return [Subtask(id=i, description=d) for i, d in enumerate((d for d in cleaned if d), start=1)]


class LineSubtaskParser:
    """
    Default decomposition parser.

    - Each line is a candidate subtask; list markers such as `1.`, `2)`,
      `(3)`, `-`, `*`, `•` and `Step 4:` are stripped.
    - A single line holding an inline numbered list ("1. a 2. b") is
      split on its markers.
    - When any line carries a marker, lines indented deeper than the
      outermost marker continue the previous item; nested bullets are
      joined to it with "; ". Other unmarked lines (preambles, sign-offs)
      are dropped.
    - Empty entries are discarded.
    """

    MARKER = re.compile(
        r"^(?:(?:step|task|subtask)\s*\d+\s*[:.)\-]|\(?\d+\s*[.):]|\(\d+\)|[-*•+])\s+",
        re.IGNORECASE,
    )
    INLINE_SPLIT = re.compile(r"\s+(?=\d+[.)]\s)")

    def parse(self, text: str) -> list[Subtask]:
        lines = [line for line in text.splitlines() if line.strip()]
        if len(lines) == 1:
            parts = self.INLINE_SPLIT.split(lines[0].strip())
            if len(parts) > 1:
                lines = parts

        # (marked, indent, body)
        entries: list[tuple[bool, int, str]] = []
        for raw in lines:
            stripped = raw.strip()
            indent = len(raw) - len(raw.lstrip())
            match = self.MARKER.match(stripped)
            if match:
                entries.append((True, indent, stripped[match.end():]))
            else:
                entries.append((False, indent, stripped))

        marked_indents = [indent for marked, indent, _ in entries if marked]
        if not marked_indents:
            return _to_subtasks([body for _, _, body in entries])

        top_level = min(marked_indents)
        items: list[str] = []
        for marked, indent, body in entries:
            if marked and indent <= top_level:
                items.append(body)
            elif marked and items:
                # Nested bullet: a detail of the current item.
                items[-1] = f"{items[-1]}; {body}"
            elif indent > top_level and items:
                items[-1] = f"{items[-1]} {body}"
        return _to_subtasks(items)


class DelimiterSubtaskParser:
    """Splits decomposition text on an explicit delimiter string."""

    def __init__(self, delimiter: str) -> None:
        if not delimiter:
            raise ValueError("delimiter must not be empty")
        self.delimiter = delimiter

    def parse(self, text: str) -> list[Subtask]:
        return _to_subtasks(text.split(self.delimiter))


class TagSubtaskParser:
    """
    Extracts subtasks from XML-style tags, e.g. `<task>...</task>`.

    When a task element contains a `<description>` element, only its
    content is used.
    """

    def __init__(self, tag: str = "task") -> None:
        self.tag = tag
        self._pattern = re.compile(rf"<{re.escape(tag)}\b[^>]*>(.*?)</{re.escape(tag)}>", re.DOTALL)
        self._description = re.compile(r"<description>(.*?)</description>", re.DOTALL)

    def parse(self, text: str) -> list[Subtask]:
        descriptions = []
        for body in self._pattern.findall(text):
            inner = self._description.search(body)
            descriptions.append(inner.group(1) if inner else body)
        return _to_subtasks(descriptions)


# =============================================================================
# Evaluation parsing
# =============================================================================


@runtime_checkable
class EvaluationParser(Protocol):
    """Turns evaluation text into an `Evaluation`."""

    def parse(self, text: str, threshold: float) -> Evaluation:
        ...


class ScoreEvaluationParser:
    """
    Default evaluation parser: the leading number is the score.

    Accepted shapes include "8", "8.5 - tighten the intro",
    "Score: 7/10 Needs examples", "**Rating**: 4/5" and "**Score:** 9/10".
    A `/N` denominator rescales the value into [score_min, score_max]. The
    score is clamped to that range and the remaining text becomes the
    feedback.

    Text with no leading number yields `score_min` with the raw text as
    feedback and `parsed=False`; it is never an error.
    """

    LEADING_SCORE = re.compile(
        r"^\s*(?:[*_]*\s*(?:score|rating)\s*[*_]*\s*[:=]?\s*[*_]*\s*)?"
        r"(-?\d+(?:\.\d+)?)"
        r"(?:\s*/\s*(\d+(?:\.\d+)?))?",
        re.IGNORECASE,
    )

    def __init__(self, score_min: float = 0.0, score_max: float = 10.0) -> None:
        if score_min >= score_max:
            raise ValueError("score_min must be lower than score_max")
        self.score_min = score_min
        self.score_max = score_max

    def _clamp(self, value: float) -> float:
        return max(self.score_min, min(self.score_max, value))

    def parse(self, text: str, threshold: float) -> Evaluation:
        match = self.LEADING_SCORE.match(text)
        if match is None:
            score = self.score_min
            return Evaluation(score=score, feedback=text.strip(), passed=score >= threshold, parsed=False)

        value = float(match.group(1))
        denominator = match.group(2)
        if denominator is not None and float(denominator) > 0:
            value = self.score_min + value / float(denominator) * (self.score_max - self.score_min)
        score = self._clamp(value)
        feedback = text[match.end():].strip().lstrip(":-.,;)").strip()
        return Evaluation(score=score, feedback=feedback, passed=score >= threshold)


__all__ = [
    "SubtaskParser",
    "LineSubtaskParser",
    "DelimiterSubtaskParser",
    "TagSubtaskParser",
    "EvaluationParser",
    "ScoreEvaluationParser",
]
