"""Schema validation collaborator backed by pydantic."""

from __future__ import annotations

from typing import Any

from pydantic import TypeAdapter, ValidationError

from llm_sanitizer.schemas import ValidationIssue, ValidationOutcome


class ValidationService:
    @staticmethod
    def _issues(exc: ValidationError) -> list[ValidationIssue]:
        return [
            ValidationIssue(
                loc=".".join(str(part) for part in error.get("loc", ())),
                message=error.get("msg", "invalid"),
                code=error.get("type", "invalid"),
            )
            for error in exc.errors()
        ]

    def validate(self, value: Any, model: Any) -> ValidationOutcome:
        """Validate a parsed value against a pydantic model or any type pydantic understands."""
        try:
            data = TypeAdapter(model).validate_python(value)
        except ValidationError as exc:
            return ValidationOutcome(success=False, issues=self._issues(exc))
        return ValidationOutcome(success=True, data=data)


schema_validator = ValidationService()
