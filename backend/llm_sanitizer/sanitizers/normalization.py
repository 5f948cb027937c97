from __future__ import annotations

import re

from llm_sanitizer.domain.span import strip_code_fences as _strip_fences
from llm_sanitizer.sanitizers.base import (
    DEFAULT_OPTIONS,
    ReplacementRule,
    StepOptions,
    StepResult,
    execute_rules,
    group_template,
)


_CTRL_THOUGHT_RE = re.compile(r"<ctrl\d+>\s*thought\s*\n?", re.IGNORECASE)
_CTRL_TOKEN_RE = re.compile(r"<ctrl\d+>")
_THOUGHT_PREFIX_RE = re.compile(r"\A\s*thought\s*:?[ \t]*\r?\n", re.IGNORECASE)

_DOUBLE_CURLY = frozenset("\u201c\u201d")
_SINGLE_CURLY = frozenset("\u2018\u2019")
_CLOSING_FOLLOWERS = frozenset(":,}]")

_INVISIBLE_CHARS = frozenset("\u200b\u200c\u200d\u2060\ufeff")
_KEPT_CONTROLS = frozenset("\t\n\r")
_STRING_CONTROL_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t", "\b": "\\b", "\f": "\\f"}


def trim_whitespace(text: str, options: StepOptions = DEFAULT_OPTIONS) -> StepResult:
    stripped = text.strip()
    if stripped == text:
        return StepResult.unchanged(text)
    return StepResult(stripped, True, "Trimmed surrounding whitespace")


def strip_code_fences(text: str, options: StepOptions = DEFAULT_OPTIONS) -> StepResult:
    stripped = _strip_fences(text).strip()
    if stripped == text.strip():
        return StepResult.unchanged(text)
    return StepResult(stripped, True, "Removed Markdown code fences")


_THOUGHT_RULES = (
    ReplacementRule(
        name="ctrl_thought_marker",
        pattern=_CTRL_THOUGHT_RE,
        replace=group_template(""),
        diagnostic="Removed thought marker",
    ),
    ReplacementRule(
        name="ctrl_token",
        pattern=_CTRL_TOKEN_RE,
        replace=group_template(""),
        diagnostic="Removed control token",
    ),
    ReplacementRule(
        name="thought_prefix",
        pattern=_THOUGHT_PREFIX_RE,
        replace=group_template(""),
        diagnostic="Removed leading thought line",
    ),
)


def remove_thought_markers(text: str, options: StepOptions = DEFAULT_OPTIONS) -> StepResult:
    return execute_rules(text, _THOUGHT_RULES, "Removed model thought markers", options)


def _next_non_space(text: str, index: int) -> str:
    for cursor in range(index, len(text)):
        if not text[cursor].isspace():
            return text[cursor]
    return ""


def normalize_curly_quotes(text: str, options: StepOptions = DEFAULT_OPTIONS) -> StepResult:
    """Turn typographic quotes acting as string delimiters into ASCII quotes.

    Curly quotes inside an ASCII-quoted string are always content. A string
    opened with a curly quote ends at the next curly quote, or at an ASCII
    quote followed by a structural character; other ASCII quotes inside it
    are escaped.
    """
    if not any(ch in _DOUBLE_CURLY or ch in _SINGLE_CURLY for ch in text):
        return StepResult.unchanged(text)

    out: list[str] = []
    state = "outside"
    backslashes = 0
    replaced = 0
    for index, ch in enumerate(text):
        escaped = backslashes % 2 == 1
        if state == "ascii":
            if ch == '"' and not escaped:
                state = "outside"
            out.append(ch)
        elif state == "curly":
            if ch in _DOUBLE_CURLY:
                state = "outside"
                out.append('"')
                replaced += 1
            elif ch == '"' and not escaped:
                if _next_non_space(text, index + 1) in _CLOSING_FOLLOWERS:
                    state = "outside"
                    out.append('"')
                else:
                    out.append('\\"')
                    replaced += 1
            else:
                out.append(ch)
        else:
            if ch in _DOUBLE_CURLY:
                state = "curly"
                out.append('"')
                replaced += 1
            elif ch == '"':
                state = "ascii"
                out.append(ch)
            elif ch in _SINGLE_CURLY:
                out.append("'")
                replaced += 1
            else:
                out.append(ch)
        backslashes = backslashes + 1 if ch == "\\" else 0

    if not replaced:
        return StepResult.unchanged(text)
    return StepResult("".join(out), True, "Normalized curly quotes", (f"replaced {replaced} quote(s)",))


def remove_control_characters(text: str, options: StepOptions = DEFAULT_OPTIONS) -> StepResult:
    """Drop invisible and control characters outside strings, escape them inside."""
    out: list[str] = []
    in_string = False
    backslashes = 0
    removed = 0
    escaped = 0
    for ch in text:
        code = ord(ch)
        if in_string:
            if ch == '"' and backslashes % 2 == 0:
                in_string = False
                out.append(ch)
            elif code < 0x20:
                out.append(_STRING_CONTROL_ESCAPES.get(ch, f"\\u{code:04x}"))
                escaped += 1
            else:
                out.append(ch)
        else:
            if ch == '"':
                in_string = True
                out.append(ch)
            elif (code < 0x20 and ch not in _KEPT_CONTROLS) or code == 0x7F or ch in _INVISIBLE_CHARS:
                removed += 1
            else:
                out.append(ch)
        backslashes = backslashes + 1 if ch == "\\" else 0

    if not removed and not escaped:
        return StepResult.unchanged(text)
    diagnostics = []
    if removed:
        diagnostics.append(f"removed {removed} control character(s) outside strings")
    if escaped:
        diagnostics.append(f"escaped {escaped} control character(s) inside strings")
    return StepResult("".join(out), True, "Removed or escaped control characters", tuple(diagnostics))
