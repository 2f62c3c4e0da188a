"""Tests for structured logging."""

from __future__ import annotations

import json
import logging

import pytest

from workflow_patterns.config import LoggingConfig
from workflow_patterns.logging import (
    JSONFormatter,
    LogContext,
    StepLog,
    StructuredLogger,
    TextFormatter,
    Timer,
    WorkflowLog,
    configure_logging,
    generate_trace_id,
    timed,
    truncate_for_log,
)
from workflow_patterns.workflows import ChainConfig, ChainWorkflow

from tests._testkit import ScriptedCompletion, fail


@pytest.fixture
def json_logger():
    return StructuredLogger("workflow_patterns.tests.json", level="DEBUG", json_output=True)


def records(caplog, name):
    return [json.loads(r.getMessage()) for r in caplog.records if r.name == name]


class TestLogContext:
    def test_to_dict_flattens_extra(self):
        context = LogContext(trace_id="t1", pattern="chain", extra={"run": 2})
        assert context.to_dict() == {"trace_id": "t1", "pattern": "chain", "run": 2}

    def test_with_update(self):
        context = LogContext(trace_id="t1").with_update(step="combine", attempt=1)
        assert context.trace_id == "t1"
        assert context.step == "combine"
        assert context.extra == {"attempt": 1}


class TestStructuredLogger:
    def test_trace_context_is_scoped(self, json_logger, caplog):
        caplog.set_level(logging.DEBUG, logger=json_logger.name)

        with json_logger.trace_context(trace_id="trace_abc", pattern="router") as trace_id:
            json_logger.info("inside")
        json_logger.info("outside")

        inside, outside = records(caplog, json_logger.name)
        assert trace_id == "trace_abc"
        assert inside["trace_id"] == "trace_abc"
        assert inside["pattern"] == "router"
        assert "trace_id" not in outside

    def test_log_step_levels(self, json_logger, caplog):
        caplog.set_level(logging.DEBUG, logger=json_logger.name)

        json_logger.log_step(StepLog(label="chain[0]", duration_ms=5.0))
        json_logger.log_step(StepLog(label="chain[1]", success=False, error="timeout"))

        ok, failed = [r for r in caplog.records if r.name == json_logger.name]
        assert ok.levelno == logging.INFO
        assert failed.levelno == logging.WARNING
        assert json.loads(failed.getMessage())["error"] == "timeout"

    def test_prompt_preview_dropped_by_default(self, json_logger, caplog):
        caplog.set_level(logging.DEBUG, logger=json_logger.name)

        json_logger.log_step(StepLog(label="s", prompt_preview="secret prompt"))

        assert "prompt_preview" not in records(caplog, json_logger.name)[0]

    def test_prompt_preview_kept_when_enabled(self, caplog):
        logger = StructuredLogger("workflow_patterns.tests.prompts", json_output=True, log_prompts=True)
        caplog.set_level(logging.DEBUG, logger=logger.name)

        logger.log_step(StepLog(label="s", prompt_preview="visible prompt"))

        assert records(caplog, logger.name)[0]["prompt_preview"] == "visible prompt"

    def test_log_workflow(self, json_logger, caplog):
        caplog.set_level(logging.DEBUG, logger=json_logger.name)

        json_logger.log_workflow(WorkflowLog(pattern="parallel", steps=3, failed_steps=1))

        record = records(caplog, json_logger.name)[0]
        assert record["event_type"] == "workflow"
        assert record["steps"] == 3
        assert record["failed_steps"] == 1

    def test_disabled_level_is_skipped(self, caplog):
        logger = StructuredLogger("workflow_patterns.tests.quiet", level="WARNING")
        caplog.set_level(logging.WARNING, logger=logger.name)

        logger.info("hidden")
        logger.warning("shown")

        assert [r.levelname for r in caplog.records if r.name == logger.name] == ["WARNING"]

    def test_from_config(self):
        logger = StructuredLogger.from_config(
            LoggingConfig(level="DEBUG", format="json", log_prompts=True),
            name="workflow_patterns.tests.config",
        )
        assert logger.json_output is True
        assert logger.log_prompts is True
        assert logger.logger.level == logging.DEBUG

    @pytest.mark.asyncio
    async def test_workflow_runs_emit_step_and_workflow_records(self, json_logger, caplog, make_executor):
        caplog.set_level(logging.DEBUG, logger=json_logger.name)
        executor = make_executor(ScriptedCompletion(["one", fail()]))
        executor.logger = json_logger

        await ChainWorkflow(executor, ChainConfig(["A:", "B:"])).run("x")

        logged = records(caplog, json_logger.name)
        steps = [r for r in logged if r.get("event_type") == "step"]
        workflow = [r for r in logged if r.get("event_type") == "workflow"]
        assert [s["label"] for s in steps] == ["chain[0]", "chain[1]"]
        assert all(s["pattern"] == "chain" for s in steps)
        assert len({s["trace_id"] for s in steps}) == 1
        assert workflow[0]["success"] is False
        assert workflow[0]["error"] == "provider_failure"


class TestFormatters:
    def make_record(self, message, level=logging.INFO):
        return logging.LogRecord("wp", level, __file__, 1, message, None, None)

    def test_json_formatter_merges_structured_message(self):
        output = json.loads(JSONFormatter().format(self.make_record('{"message": "hi", "step": "s"}')))
        assert output["message"] == "hi"
        assert output["step"] == "s"
        assert output["level"] == "INFO"

    def test_json_formatter_plain_message(self):
        output = json.loads(JSONFormatter().format(self.make_record("plain text")))
        assert output["message"] == "plain text"

    def test_text_formatter(self):
        output = TextFormatter().format(self.make_record("hello", logging.WARNING))
        assert "WARNING" in output
        assert output.endswith("hello")


class TestUtilities:
    def test_generate_trace_id(self):
        first, second = generate_trace_id(), generate_trace_id()
        assert first.startswith("trace_")
        assert first != second

    def test_truncate_for_log(self):
        assert truncate_for_log("short") == "short"
        assert truncate_for_log("x" * 300, max_length=10) == "x" * 10 + "... (300 chars total)"

    def test_timer(self):
        timer = Timer()
        assert timer.stop() >= 0
        with timed() as t:
            pass
        assert t.stopped

    def test_configure_logging(self):
        logger = configure_logging(LoggingConfig(level="WARNING", format="json"))
        assert logger.json_output is True
        assert all(isinstance(h.formatter, JSONFormatter) for h in logger.logger.handlers)
        configure_logging(LoggingConfig())
