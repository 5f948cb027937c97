"""
LLM JSON Sanitizer — Pydantic Schemas
=====================================
Result shapes returned by the pipeline and the validation adapter.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


# ── Pipeline Schemas ──

class AppliedStep(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    group: str
    description: str = ""
    diagnostics: list[str] = Field(default_factory=list)
    iterations: int = Field(1, ge=1)


class PipelineResult(BaseModel):
    content: str
    applied_steps: list[AppliedStep] = Field(default_factory=list)
    final_parse_succeeded: bool = False
    data: Any = None
    transforms: list[str] = Field(default_factory=list)
    original_text: str = ""
    span_truncated: bool = False
    parse_error: Optional[str] = None
    sanitize_id: str = ""

    @property
    def step_names(self) -> list[str]:
        return [step.name for step in self.applied_steps]

    @property
    def changed(self) -> bool:
        return bool(self.applied_steps)


# ── Validation Schemas ──

class ValidationIssue(BaseModel):
    loc: str = ""
    message: str
    code: str = "invalid"


class ValidationOutcome(BaseModel):
    success: bool
    data: Any = None
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def messages(self) -> list[str]:
        return [f"{item.loc}: {item.message}" if item.loc else item.message for item in self.issues]
