"""Locate the JSON payload inside a raw LLM response."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass

from llm_sanitizer.domain.scanner import PAIRS


_OPENING_FENCE_RE = re.compile(r"```[a-zA-Z0-9_-]*[ \t]*\r?\n?")
_CLOSING_FENCE_RE = re.compile(r"\s*```\s*$")
_CODE_BEFORE_BRACE_RE = re.compile(r"[a-zA-Z_$]")
_OBJECT_START_CHARS = frozenset(' \t\r\n"}\'\u201c')
_ARRAY_START_CHARS = frozenset(' \t\r\n]"{[-0123456789\u201c')
_LEADING_CANDIDATE_WINDOW = 10
_MAX_LATER_OBJECT_CANDIDATES = 8


@dataclass(frozen=True, slots=True)
class Span:
    source: str
    start: int
    end: int
    truncated: bool = False

    @property
    def content(self) -> str:
        return self.source[self.start : self.end].strip()


def strip_code_fences(text: str) -> str:
    """Drop a Markdown fence that opens before the payload and one that closes the text."""
    value = text or ""
    first_opener = min((pos for pos in (value.find("{"), value.find("[")) if pos >= 0), default=-1)
    match = _OPENING_FENCE_RE.search(value)
    if match and (first_opener < 0 or match.start() < first_opener):
        value = value[: match.start()] + value[match.end() :]
    return _CLOSING_FENCE_RE.sub("", value)


def _is_plausible_start(text: str, position: int) -> bool:
    opener = text[position]
    if opener == "{" and position > 0 and _CODE_BEFORE_BRACE_RE.match(text[position - 1]):
        # else{ / if{ in a code snippet
        return False
    if position + 1 >= len(text):
        return False
    following = text[position + 1]
    if opener == "{":
        return following in _OBJECT_START_CHARS or (following.isascii() and following.isalpha())
    return following in _ARRAY_START_CHARS


def _find_end(text: str, start: int) -> int:
    """Exclusive end of the balanced run of ``text[start]``, or -1."""
    opener = text[start]
    closer = PAIRS[opener]
    depth = 0
    in_string = False
    escape = False
    for idx in range(start, len(text)):
        ch = text[idx]
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
            continue
        if ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return idx + 1
    return -1


def _parses(text: str) -> bool:
    try:
        json.loads(text)
    except (ValueError, RecursionError):
        return False
    return True


def _later_object_span(text: str, candidates: list[int], after: int) -> tuple[int, int] | None:
    """First balanced object starting at or after ``after`` that parses as-is."""
    checked = 0
    for start in candidates:
        if start < after or text[start] != "{" or not _is_plausible_start(text, start):
            continue
        checked += 1
        if checked > _MAX_LATER_OBJECT_CANDIDATES:
            return None
        end = _find_end(text, start)
        if end >= 0 and _parses(text[start:end]):
            return start, end
    return None


def extract_span(text: str) -> Span | None:
    """Return the span judged to hold the JSON payload, or None.

    Candidates are every ``{`` and ``[``; one sitting at the start of the
    trimmed text is tried first. Depth is counted for the candidate's own
    delimiter type only. A candidate with no matching closer at the start
    of the text runs to the end and is marked truncated. A bracketed span
    that is not the leading text gives way to a longer object after it
    that already parses, so prose like ``Note [1]:`` is not taken as data.
    """
    value = strip_code_fences(text or "")
    candidates = [index for index, ch in enumerate(value) if ch in PAIRS]
    if not candidates:
        return None

    leading = len(value) - len(value.lstrip())
    first = next(
        (pos for pos in candidates if pos == leading or (leading == 0 and pos < _LEADING_CANDIDATE_WINDOW)),
        None,
    )
    ordered = [first, *[pos for pos in candidates if pos != first]] if first is not None else candidates

    fallback: int | None = None
    for start in ordered:
        if not _is_plausible_start(value, start):
            continue
        if fallback is None:
            fallback = start
        end = _find_end(value, start)
        if end >= 0:
            if value[start] == "[" and start != leading:
                later = _later_object_span(value, candidates, end)
                if later is not None and later[1] - later[0] > end - start:
                    return Span(value, *later)
            return Span(value, start, end)
        if start == first:
            return Span(value, start, len(value), truncated=True)

    start = fallback if fallback is not None else candidates[0]
    end = _find_end(value, start)
    if end >= 0:
        return Span(value, start, end)
    return Span(value, start, len(value), truncated=True)
