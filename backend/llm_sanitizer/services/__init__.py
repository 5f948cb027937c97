"""Lazy service exports so importing one service does not build the others."""

__all__ = [
    "sanitizer_pipeline",
    "schema_validator",
]


def __getattr__(name: str):
    if name == "sanitizer_pipeline":
        from llm_sanitizer.services.pipeline_service import sanitizer_pipeline

        return sanitizer_pipeline
    if name == "schema_validator":
        from llm_sanitizer.services.validation_service import schema_validator

        return schema_validator
    raise AttributeError(name)
