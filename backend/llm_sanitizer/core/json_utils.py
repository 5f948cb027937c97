"""Utilities for strict JSON extraction/repair from LLM outputs."""

from __future__ import annotations

from typing import Any, TypeVar

from llm_sanitizer.core.errors import SchemaValidationFailed, UnparseableAfterRepair
from llm_sanitizer.schemas import PipelineResult
from llm_sanitizer.services.pipeline_service import sanitizer_pipeline
from llm_sanitizer.services.validation_service import schema_validator

T = TypeVar("T")


def sanitize_llm_json(raw_text: str) -> PipelineResult:
    """Repair ``raw_text`` and report every applied step.

    Raises ``NoJsonContentFound`` when the text holds no ``{`` or ``[``.
    A result that still does not parse is returned with
    ``final_parse_succeeded=False``.
    """
    return sanitizer_pipeline.run(raw_text)


def _require_parsed(result: PipelineResult) -> PipelineResult:
    if not result.final_parse_succeeded:
        raise UnparseableAfterRepair(
            "unparseable_after_repair",
            parse_error=result.parse_error or "",
            original_text=result.original_text,
            applied_steps=result.applied_steps,
        )
    return result


def parse_llm_json(raw_text: str) -> dict[str, Any] | list[Any]:
    """Parse JSON from potentially noisy LLM text with strict validation."""
    return _require_parsed(sanitize_llm_json(raw_text)).data


def parse_llm_json_object(raw_text: str) -> dict[str, Any]:
    data = parse_llm_json(raw_text)
    if not isinstance(data, dict):
        raise UnparseableAfterRepair("json_root_must_be_object", original_text=raw_text)
    return data


def parse_and_validate(raw_text: str, model: type[T]) -> T:
    result = _require_parsed(sanitize_llm_json(raw_text))
    outcome = schema_validator.validate(result.data, model)
    if not outcome.success:
        raise SchemaValidationFailed(
            "schema_validation_failed",
            issues=outcome.messages,
            original_text=result.original_text,
            applied_steps=result.applied_steps,
        )
    return outcome.data
