"""Removal of non-JSON fragments models splice into otherwise valid output."""

from __future__ import annotations

import re

from llm_sanitizer.sanitizers.base import (
    DEFAULT_OPTIONS,
    ReplacementRule,
    StepOptions,
    StepResult,
    execute_rules,
    group_template,
)


_BINARY_MARKER_RE = re.compile(r"<[a-z]_bin_\d+>")

_TRUNCATION_LINE_RE = re.compile(
    r"^[ \t]*(?://[ \t]*)?(?:\.\.\.|\u2026|\[\.\.\.\]|\(truncated\)|_TRUNCATED_|\[truncated\])[ \t]*,?[ \t]*(?:\r?\n|$)",
    re.MULTILINE | re.IGNORECASE,
)
_TRAILING_ELLIPSIS_RE = re.compile(r",\s*(?:\.\.\.|\u2026)\s*(?=[}\]])")

_EXTRA_FIELD_LINE_RE = re.compile(r"^[ \t]*extra_[a-z_]+[ \t]*[:=][^\n]*(?:\n|$)", re.MULTILINE)
_AI_WARNING_RE = re.compile(
    r"^[ \t]*(?:AI-generated content\b|This (?:response|content) (?:was|is) (?:AI-)?generated\b)[^\n]*(?:\n|$)",
    re.MULTILINE | re.IGNORECASE,
)


_BINARY_RULES = (
    ReplacementRule(
        name="binary_marker",
        pattern=_BINARY_MARKER_RE,
        replace=group_template(""),
        diagnostic="Removed binary corruption marker",
    ),
)

_TRUNCATION_RULES = (
    ReplacementRule(
        name="truncation_line",
        pattern=_TRUNCATION_LINE_RE,
        replace=group_template(""),
        diagnostic="Removed truncation marker line",
    ),
    ReplacementRule(
        name="trailing_ellipsis",
        pattern=_TRAILING_ELLIPSIS_RE,
        replace=group_template(""),
        diagnostic="Removed trailing ellipsis element",
    ),
)

_COMMENTARY_RULES = (
    ReplacementRule(
        name="extra_field_line",
        pattern=_EXTRA_FIELD_LINE_RE,
        replace=group_template(""),
        diagnostic="Removed extra_* commentary line",
    ),
    ReplacementRule(
        name="ai_content_warning",
        pattern=_AI_WARNING_RE,
        replace=group_template(""),
        diagnostic="Removed AI content warning",
    ),
)


def remove_binary_corruption_markers(text: str, options: StepOptions = DEFAULT_OPTIONS) -> StepResult:
    return execute_rules(text, _BINARY_RULES, "Removed binary corruption markers", options)


def remove_truncation_markers(text: str, options: StepOptions = DEFAULT_OPTIONS) -> StepResult:
    return execute_rules(text, _TRUNCATION_RULES, "Removed truncation markers", options)


def remove_llm_commentary(text: str, options: StepOptions = DEFAULT_OPTIONS) -> StepResult:
    return execute_rules(text, _COMMENTARY_RULES, "Removed model commentary", options)
