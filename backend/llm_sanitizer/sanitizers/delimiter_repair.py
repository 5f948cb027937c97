from __future__ import annotations

import re

from llm_sanitizer.domain.delimiters import (
    StructuralContext,
    apply_corrections,
    classify_position,
    find_closer_corrections,
    unclosed_openers,
)
from llm_sanitizer.domain.scanner import Token, TokenKind, tokenize
from llm_sanitizer.sanitizers.base import (
    DEFAULT_OPTIONS,
    ReplacementRule,
    RuleContext,
    StepOptions,
    StepResult,
    execute_rules,
)


_TRAILING_COMMA_RE = re.compile(r",(?P<gap>(?:\s*,)*\s*)(?P<closer>[}\]])")


def _ends_value(text: str, token: Token) -> bool:
    if token.kind in (TokenKind.STRING, TokenKind.OTHER):
        return True
    return token.kind == TokenKind.DELIMITER and text[token.start] in "}]"


def _starts_value(text: str, token: Token) -> bool:
    if token.kind in (TokenKind.STRING, TokenKind.OTHER):
        return True
    return token.kind == TokenKind.DELIMITER and text[token.start] in "{["


def add_missing_commas(text: str, options: StepOptions = DEFAULT_OPTIONS) -> StepResult:
    """Insert a comma between a value and the next one when only a line break separates them."""
    tokens = tokenize(text)
    insert_at: list[int] = []
    previous: Token | None = None
    saw_newline = False
    for token in tokens:
        if token.kind == TokenKind.WHITESPACE:
            saw_newline = saw_newline or "\n" in token.text(text)
            continue
        if previous is not None and saw_newline and _ends_value(text, previous) and _starts_value(text, token):
            insert_at.append(previous.end)
        previous = token
        saw_newline = False

    if not insert_at:
        return StepResult.unchanged(text)
    pieces: list[str] = []
    cursor = 0
    for position in insert_at:
        pieces.append(text[cursor:position])
        pieces.append(",")
        cursor = position
    pieces.append(text[cursor:])
    diagnostics = tuple(f"inserted comma at offset {pos}" for pos in insert_at[: options.max_diagnostics])
    return StepResult("".join(pieces), True, "Added missing commas", diagnostics)


def _drop_commas(match: re.Match[str], _: RuleContext) -> str:
    return match.group("gap").replace(",", "") + match.group("closer")


_TRAILING_COMMA_RULES = (
    ReplacementRule(
        name="trailing_comma",
        pattern=_TRAILING_COMMA_RE,
        replace=_drop_commas,
        diagnostic="Removed trailing comma",
    ),
)


def remove_trailing_commas(text: str, options: StepOptions = DEFAULT_OPTIONS) -> StepResult:
    return execute_rules(text, _TRAILING_COMMA_RULES, "Removed trailing commas", options)


def fix_mismatched_delimiters(text: str, options: StepOptions = DEFAULT_OPTIONS) -> StepResult:
    corrections = find_closer_corrections(text)
    if not corrections:
        return StepResult.unchanged(text)
    diagnostics = tuple(
        f"offset {item.position}: {item.found!r} -> {item.replacement!r}"
        for item in corrections[: options.max_diagnostics]
    )
    return StepResult(apply_corrections(text, corrections), True, "Fixed mismatched delimiters", diagnostics)


def _ends_with_dangling_key(text: str) -> bool:
    significant = [token for token in tokenize(text) if token.kind != TokenKind.WHITESPACE]
    if len(significant) < 2 or significant[-1].kind != TokenKind.STRING:
        return False
    before = significant[-2]
    if before.kind != TokenKind.DELIMITER or text[before.start] not in "{,":
        return False
    return classify_position(text, len(text)) == StructuralContext.OBJECT


def complete_truncated_structures(text: str, options: StepOptions = DEFAULT_OPTIONS) -> StepResult:
    """Close whatever a truncated response left open.

    An unterminated string is closed first. A trailing comma is dropped, a
    dangling colon or key gets ``null``, then closers for the remaining open
    containers are appended innermost first.
    """
    state = unclosed_openers(text)
    if not state.stack and not state.in_string:
        return StepResult.unchanged(text)

    notes: list[str] = []
    result = text
    if state.in_string:
        trailing = len(result) - len(result.rstrip("\\"))
        if trailing % 2 == 1:
            result = result[:-1]
        result += '"'
        notes.append("closed unterminated string")

    result = result.rstrip()
    if result.endswith(","):
        result = result[:-1].rstrip()
        notes.append("dropped dangling comma")
    if result.endswith(":"):
        result += " null"
        notes.append("filled dangling value with null")
    elif _ends_with_dangling_key(result):
        result += ": null"
        notes.append("filled dangling key with null")

    closers = unclosed_openers(result).closers
    if closers:
        result += closers
        notes.append(f"appended {closers!r}")
    if result == text:
        return StepResult.unchanged(text)
    return StepResult(result, True, "Completed truncated structures", tuple(notes))
