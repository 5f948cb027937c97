"""Sanitizers package."""
from llm_sanitizer.sanitizers.base import (
    SanitizationStep, StepGroup, StepOptions, StepResult,
    ReplacementRule, execute_rules,
)
from llm_sanitizer.sanitizers.catalog import CATALOG, get_step

__all__ = [
    "SanitizationStep", "StepGroup", "StepOptions", "StepResult",
    "ReplacementRule", "execute_rules",
    "CATALOG", "get_step",
]
