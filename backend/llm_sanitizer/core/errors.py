"""Typed failures raised by the sanitizer facade."""

from __future__ import annotations

from typing import Any


class JsonSanitizationError(ValueError):
    code = "json_sanitization_error"

    def __init__(
        self,
        message: str,
        *,
        original_text: str = "",
        applied_steps: list[Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.original_text = original_text
        self.applied_steps = list(applied_steps or [])

    @property
    def step_names(self) -> list[str]:
        return [getattr(step, "name", str(step)) for step in self.applied_steps]


class NoJsonContentFound(JsonSanitizationError):
    """The text holds no ``{`` or ``[`` at all."""

    code = "no_json_content"


class UnparseableAfterRepair(JsonSanitizationError):
    """Every repair ran and the result still does not parse."""

    code = "unparseable_after_repair"

    def __init__(self, message: str, *, parse_error: str = "", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.parse_error = parse_error


class SchemaValidationFailed(JsonSanitizationError):
    code = "schema_validation_failed"

    def __init__(self, message: str, *, issues: list[str] | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.issues = list(issues or [])
