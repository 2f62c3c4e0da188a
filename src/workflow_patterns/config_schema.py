"""
JSON schemas for configuration validation.
"""

STEP_SCHEMA = {
    "type": "object",
    "properties": {
        "timeout": {"type": "number", "exclusiveMinimum": 0},
    },
    "additionalProperties": False,
}

WORKERS_SCHEMA = {
    "type": "object",
    "properties": {
        "max_concurrency": {"type": ["integer", "null"], "minimum": 1},
        "failed_placeholder": {"type": "string"},
    },
    "additionalProperties": False,
}

EVALUATION_SCHEMA = {
    "type": "object",
    "properties": {
        "threshold": {"type": "number"},
        "max_iterations": {"type": "integer", "minimum": 1},
        "score_min": {"type": "number"},
        "score_max": {"type": "number"},
    },
    "additionalProperties": False,
}

LOGGING_SCHEMA = {
    "type": "object",
    "properties": {
        "level": {"type": "string", "enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]},
        "format": {"type": "string", "enum": ["text", "json"]},
        "log_prompts": {"type": "boolean"},
    },
    "additionalProperties": False,
}

OPENAI_SCHEMA = {
    "type": "object",
    "properties": {
        "api_key": {"type": ["string", "null"]},
        "base_url": {"type": ["string", "null"]},
        "organization": {"type": ["string", "null"]},
        "model": {"type": "string"},
        "temperature": {"type": ["number", "null"], "minimum": 0.0, "maximum": 2.0},
        "max_tokens": {"type": ["integer", "null"], "minimum": 1},
        "system_prompt": {"type": ["string", "null"]},
        "max_retries": {"type": "integer", "minimum": 0},
    },
    "additionalProperties": False,
}

CONFIG_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "workflow-patterns configuration",
    "type": "object",
    "properties": {
        "step": STEP_SCHEMA,
        "workers": WORKERS_SCHEMA,
        "evaluation": EVALUATION_SCHEMA,
        "logging": LOGGING_SCHEMA,
        "openai": OPENAI_SCHEMA,
    },
    "additionalProperties": False,
}
