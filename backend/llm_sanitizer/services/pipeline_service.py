"""
Sanitizer pipeline
==================
Runs the ordered sanitizer catalog over the JSON span of a raw LLM
response, parsing after every step that changed the text and stopping at
the first successful parse.
"""

from __future__ import annotations

import json
from typing import Any, Iterable

from llm_sanitizer.core.config import Settings, get_settings
from llm_sanitizer.core.correlation import bind_sanitize_id, clear_sanitize_id
from llm_sanitizer.core.errors import NoJsonContentFound
from llm_sanitizer.core.logging import get_logger
from llm_sanitizer.domain.property_names import DEFAULT_TABLES, PropertyNameTables
from llm_sanitizer.domain.span import extract_span
from llm_sanitizer.sanitizers.base import SanitizationStep, StepOptions
from llm_sanitizer.sanitizers.catalog import CATALOG
from llm_sanitizer.schemas import AppliedStep, PipelineResult
from llm_sanitizer.services.transforms import apply_post_parse_transforms

logger = get_logger("pipeline_service")


def _reject_constant(token: str) -> Any:
    raise ValueError(f"non_standard_constant:{token}")


def strict_parse(text: str) -> tuple[Any, str | None]:
    """Parse ``text`` as a JSON object or array.

    Returns ``(value, None)`` on success and ``(None, error)`` otherwise.
    ``NaN`` and ``Infinity`` are rejected, as is nesting deeper than the
    decoder can recurse.
    """
    if not text:
        return None, "empty_json_payload"
    try:
        data = json.loads(text, parse_constant=_reject_constant)
    except ValueError as exc:
        return None, str(exc)
    except RecursionError:
        return None, "json_nesting_too_deep"
    if not isinstance(data, (dict, list)):
        return None, "json_root_must_be_object_or_array"
    return data, None


def _cap_diagnostics(items: list[str], limit: int, capped: bool, max_iterations: int) -> list[str]:
    result = items[:limit]
    if len(items) > limit:
        result.append(f"... {len(items) - limit} more")
    if capped:
        result.append(f"fixpoint_cap_reached: {max_iterations}")
    return result


class SanitizerPipeline:
    def __init__(
        self,
        steps: Iterable[SanitizationStep] = CATALOG,
        settings: Settings | None = None,
        tables: PropertyNameTables = DEFAULT_TABLES,
    ) -> None:
        self.steps = tuple(steps)
        self.tables = tables
        self._settings = settings

    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()

    def run(self, raw_text: str) -> PipelineResult:
        if not isinstance(raw_text, str):
            raise TypeError(f"raw_text must be str, got {type(raw_text).__name__}")
        sanitize_id = bind_sanitize_id()
        try:
            return self._run(raw_text, sanitize_id)
        finally:
            clear_sanitize_id()

    def _run(self, raw_text: str, sanitize_id: str) -> PipelineResult:
        stripped = raw_text.strip()
        data, error = strict_parse(stripped)
        if error is None:
            return self._success(stripped, data, [], raw_text, sanitize_id)

        span = extract_span(raw_text)
        if span is None:
            raise NoJsonContentFound("no_json_content", original_text=raw_text)

        content = span.content
        applied: list[AppliedStep] = []
        if content != stripped:
            applied.append(
                AppliedStep(
                    name="extract_json_span",
                    group="extraction",
                    description="Extracted JSON span",
                    diagnostics=[f"span [{span.start}:{span.end}] truncated={span.truncated}"],
                )
            )
            data, error = strict_parse(content)

        if error is not None:
            options = StepOptions(tables=self.tables, max_diagnostics=self.settings.max_diagnostics_per_step)
            parse_each_step = self.settings.parse_after_each_step
            for step in self.steps:
                previous = content
                content, record = self._apply_step(step, content, options)
                if record is None:
                    continue
                applied.append(record)
                if parse_each_step and content != previous:
                    data, error = strict_parse(content)
                    if error is None:
                        break
            if error is not None:
                data, error = strict_parse(content)

        if error is None:
            return self._success(content, data, applied, raw_text, sanitize_id, span.truncated)
        return PipelineResult(
            content=content,
            applied_steps=applied,
            final_parse_succeeded=False,
            original_text=raw_text,
            span_truncated=span.truncated,
            parse_error=error,
            sanitize_id=sanitize_id,
        )

    def _success(
        self,
        content: str,
        data: Any,
        applied: list[AppliedStep],
        raw_text: str,
        sanitize_id: str,
        span_truncated: bool = False,
    ) -> PipelineResult:
        value, transforms = apply_post_parse_transforms(data, self.tables)
        return PipelineResult(
            content=content,
            applied_steps=applied,
            final_parse_succeeded=True,
            data=value,
            transforms=transforms,
            original_text=raw_text,
            span_truncated=span_truncated,
            sanitize_id=sanitize_id,
        )

    def _apply_step(
        self,
        step: SanitizationStep,
        text: str,
        options: StepOptions,
    ) -> tuple[str, AppliedStep | None]:
        max_iterations = step.max_iterations or self.settings.max_fixpoint_iterations
        current = text
        iterations = 0
        description = ""
        diagnostics: list[str] = []
        capped = False
        while True:
            try:
                result = step.apply(current, options)
            except Exception as exc:  # noqa: BLE001
                logger.warning("sanitizer_step_failed", step=step.name, iteration=iterations + 1, error=str(exc))
                return text, AppliedStep(
                    name=step.name,
                    group=step.group,
                    description="Step failed; input passed through unchanged",
                    diagnostics=[f"step_failed: {type(exc).__name__}: {exc}"],
                    iterations=max(iterations, 1),
                )
            if not result.changed:
                break
            iterations += 1
            current = result.content
            description = result.description
            diagnostics.extend(result.diagnostics)
            if not step.fixpoint:
                break
            if iterations >= max_iterations:
                capped = True
                break

        if iterations == 0:
            return text, None
        return current, AppliedStep(
            name=step.name,
            group=step.group,
            description=description,
            diagnostics=_cap_diagnostics(diagnostics, options.max_diagnostics, capped, max_iterations),
            iterations=iterations,
        )


sanitizer_pipeline = SanitizerPipeline()
