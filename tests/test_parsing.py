"""Tests for decomposition and evaluation parsing."""

from __future__ import annotations

import pytest

from workflow_patterns.parsing import (
    DelimiterSubtaskParser,
    EvaluationParser,
    LineSubtaskParser,
    ScoreEvaluationParser,
    SubtaskParser,
    TagSubtaskParser,
)
from workflow_patterns.types import Subtask


def descriptions(subtasks):
    return [s.description for s in subtasks]


class TestLineSubtaskParser:
    """Default line-based decomposition parsing."""

    def setup_method(self):
        self.parser = LineSubtaskParser()

    def test_numbered_list(self):
        subtasks = self.parser.parse("1. Gather data\n2. Analyze trends\n3. Write summary")

        assert subtasks == [
            Subtask(1, "Gather data"),
            Subtask(2, "Analyze trends"),
            Subtask(3, "Write summary"),
        ]

    @pytest.mark.parametrize(
        "text",
        [
            "- alpha\n- beta",
            "* alpha\n* beta",
            "• alpha\n• beta",
            "1) alpha\n2) beta",
            "(1) alpha\n(2) beta",
            "Step 1: alpha\nStep 2: beta",
        ],
    )
    def test_marker_styles(self, text):
        assert descriptions(self.parser.parse(text)) == ["alpha", "beta"]

    def test_plain_lines(self):
        """Without markers every non-empty line is a subtask."""
        assert descriptions(self.parser.parse("alpha\n\nbeta\n")) == ["alpha", "beta"]

    def test_preamble_and_signoff_dropped(self):
        text = "Sure! Here are the subtasks:\n1. alpha\n2. beta\nLet me know if you need more."
        assert descriptions(self.parser.parse(text)) == ["alpha", "beta"]

    def test_indented_continuation(self):
        text = "1. Collect sources\n   from the last five years\n2. Summarize"
        assert descriptions(self.parser.parse(text)) == [
            "Collect sources from the last five years",
            "Summarize",
        ]

    def test_nested_bullets_fold_into_parent(self):
        text = "1. Research\n   - market size\n   - competitors\n2. Write report"
        assert descriptions(self.parser.parse(text)) == [
            "Research; market size; competitors",
            "Write report",
        ]

    def test_uniformly_indented_list(self):
        text = "Plan:\n  - alpha\n      detail\n  - beta"
        assert descriptions(self.parser.parse(text)) == ["alpha detail", "beta"]

    def test_inline_numbered_list(self):
        assert descriptions(self.parser.parse("1. alpha 2. beta 3. gamma")) == ["alpha", "beta", "gamma"]

    def test_empty_input(self):
        assert self.parser.parse("") == []
        assert self.parser.parse("  \n \n") == []

    def test_ids_are_one_based_and_contiguous(self):
        subtasks = self.parser.parse("- a\n-    \n- b")
        assert [s.id for s in subtasks] == [1, 2]

    def test_satisfies_protocol(self):
        assert isinstance(self.parser, SubtaskParser)


class TestDelimiterSubtaskParser:
    def test_split(self):
        parser = DelimiterSubtaskParser("###")
        assert descriptions(parser.parse("first ### second ###  ### third")) == ["first", "second", "third"]

    def test_empty_delimiter_rejected(self):
        with pytest.raises(ValueError):
            DelimiterSubtaskParser("")


class TestTagSubtaskParser:
    def test_task_tags(self):
        text = "<tasks><task>alpha</task>\n<task type='x'> beta </task></tasks>"
        assert descriptions(TagSubtaskParser().parse(text)) == ["alpha", "beta"]

    def test_description_element(self):
        text = "<task><type>research</type><description>find data</description></task>"
        assert descriptions(TagSubtaskParser().parse(text)) == ["find data"]

    def test_custom_tag_and_no_match(self):
        parser = TagSubtaskParser("step")
        assert descriptions(parser.parse("<step>one</step>")) == ["one"]
        assert parser.parse("no tags here") == []


class TestScoreEvaluationParser:
    """Default evaluation parsing."""

    def setup_method(self):
        self.parser = ScoreEvaluationParser()

    def test_leading_number(self):
        evaluation = self.parser.parse("7 Needs a stronger opening.", threshold=8)

        assert evaluation.score == 7.0
        assert evaluation.feedback == "Needs a stronger opening."
        assert evaluation.passed is False
        assert evaluation.parsed is True

    def test_decimal_and_separator(self):
        evaluation = self.parser.parse("8.5 - tighten the intro", threshold=8)

        assert evaluation.score == 8.5
        assert evaluation.feedback == "tighten the intro"
        assert evaluation.passed is True

    def test_labelled_fraction(self):
        evaluation = self.parser.parse("Score: 7/10 Needs examples", threshold=8)

        assert evaluation.score == pytest.approx(7.0)
        assert evaluation.feedback == "Needs examples"

    def test_fraction_is_rescaled(self):
        evaluation = self.parser.parse("**Rating**: 4/5 solid", threshold=8)

        assert evaluation.score == pytest.approx(8.0)
        assert evaluation.passed is True

    @pytest.mark.parametrize(
        ("text", "score"),
        [
            ("**Score:** 9/10\nLooks good.", 9.0),
            ("__Rating:__ 4/5\nLooks good.", 8.0),
            ("**Score**: 9\nLooks good.", 9.0),
        ],
    )
    def test_markdown_labels(self, text, score):
        evaluation = self.parser.parse(text, threshold=8)

        assert evaluation.parsed is True
        assert evaluation.score == pytest.approx(score)
        assert evaluation.feedback == "Looks good."
        assert evaluation.passed is True

    def test_clamped_to_range(self):
        assert self.parser.parse("42", threshold=8).score == 10.0
        assert self.parser.parse("-3", threshold=8).score == 0.0

    def test_unparsable_is_minimum_score(self):
        evaluation = self.parser.parse("Looks good overall.", threshold=8)

        assert evaluation.score == 0.0
        assert evaluation.feedback == "Looks good overall."
        assert evaluation.passed is False
        assert evaluation.parsed is False

    def test_custom_range(self):
        parser = ScoreEvaluationParser(score_min=1, score_max=5)
        assert parser.parse("nothing", threshold=3).score == 1

    def test_invalid_range(self):
        with pytest.raises(ValueError):
            ScoreEvaluationParser(score_min=10, score_max=10)

    def test_satisfies_protocol(self):
        assert isinstance(self.parser, EvaluationParser)
