"""Tests for prompt templates."""

from __future__ import annotations

import pytest

from workflow_patterns.prompts import PromptTemplate, as_template


class TestPromptTemplate:
    def test_input_appended_without_placeholder(self):
        assert PromptTemplate("Summarize:").render("text") == "Summarize:\n\ntext"

    def test_input_placeholder(self):
        assert PromptTemplate("Translate '{input}' to French").render("cat") == "Translate 'cat' to French"

    def test_empty_input_is_not_appended(self):
        assert PromptTemplate("List three colors.").render("") == "List three colors."

    def test_context_placeholders(self):
        template = PromptTemplate("Route {route}: {input}")
        assert template.render("hi", route="billing", unused="x") == "Route billing: hi"

    def test_unknown_placeholders_and_braces_left_alone(self):
        template = PromptTemplate('Reply as JSON {"answer": ...} for {missing}')
        assert template.render("") == 'Reply as JSON {"answer": ...} for {missing}'

    def test_suffix_and_separator(self):
        template = PromptTemplate("Q:", suffix="Answer in {language}.", separator="\n")
        assert template.render("why?", language="English") == "Q:\nwhy?\nAnswer in English."

    def test_placeholders(self):
        template = PromptTemplate("{input} for {task}", suffix="{feedback}")
        assert template.placeholders == frozenset({"input", "task", "feedback"})
        assert template.references("feedback")
        assert not template.references("route")

    def test_input_text_is_not_re_rendered(self):
        """Braces inside the input are inserted literally."""
        assert PromptTemplate("Echo {input}").render("{task}", task="x") == "Echo {task}"


class TestAsTemplate:
    def test_string_is_coerced(self):
        assert as_template("Hello") == PromptTemplate("Hello")

    def test_template_passes_through(self):
        template = PromptTemplate("Hi", name="greeting")
        assert as_template(template) is template

    def test_other_types_rejected(self):
        with pytest.raises(TypeError):
            as_template(["not", "a", "template"])
