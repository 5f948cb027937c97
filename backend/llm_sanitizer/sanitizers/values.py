from __future__ import annotations

import re

from llm_sanitizer.sanitizers.base import (
    DEFAULT_OPTIONS,
    ReplacementRule,
    RuleContext,
    StepOptions,
    StepResult,
    execute_rules,
    group_template,
)


_STRING_BODY = r'(?:[^"\\\n]|\\.)*'
_JSON_KEYWORDS = frozenset({"true", "false", "null"})

_NONSTANDARD_LITERALS = {
    "undefined": "null",
    "NaN": "null",
    "Infinity": "null",
    "-Infinity": "null",
    "None": "null",
    "True": "true",
    "False": "false",
}
_NONSTANDARD_LITERAL_RE = re.compile(
    r"(?P<lead>[:\[,]\s*)(?P<literal>undefined|NaN|-?Infinity|None|True|False)(?=\s*(?:[,}\]]|\Z))"
)

_CONCATENATED_LITERALS_RE = re.compile(rf'"(?P<a>{_STRING_BODY})"\s*\+\s*"(?P<b>{_STRING_BODY})"')
_LITERAL_PLUS_IDENTIFIER_RE = re.compile(
    rf'(?P<literal>"{_STRING_BODY}")\s*\+\s*[A-Za-z_$][\w$.]*(?:\(\))?(?=\s*(?:[,}}\]+]|\n|\Z))'
)
_IDENTIFIER_PLUS_LITERAL_RE = re.compile(r'(?P<lead>:\s*)[A-Za-z_$][\w$.]*(?:\(\))?\s*\+\s*(?P<quote>")')

_UNQUOTED_VALUE_RE = re.compile(
    r'(?P<lead>:[ \t]*)(?P<value>[A-Za-z_$][^\s",:{}\[\]]*(?:[ \t]+[^\s",:{}\[\]]+)*)(?=[ \t]*(?:[,}\]]|\r?\n|\Z))'
)

_STRAY_BEFORE_PROPERTY_RE = re.compile(
    r'(?P<lead>(?:[{}\[\],]|^)[ \t\r\n]*)(?P<stray>[A-Za-z_$][\w$]*)(?P<key>"[A-Za-z_$][\w$]*"\s*:)',
    re.MULTILINE,
)
_STRAY_AFTER_VALUE_RE = re.compile(rf'(?P<value>:\s*"{_STRING_BODY}")(?P<stray>[A-Za-z_]{{1,20}})(?=\s*[,}}\]\n])')
_CORRUPTED_COLON_RE = re.compile(r'(?P<key>"[A-Za-z_$][\w$]*"\s*:)\s*[A-Za-z_]{1,3}"\s*:')
_CODE_MARKER_RE = re.compile(r":\s*_CODE`(?P<number>\d+)")

_VALID_ESCAPES = frozenset('"\\/bfnrt')
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def _replace_literal(match: re.Match[str], _: RuleContext) -> str:
    return match.group("lead") + _NONSTANDARD_LITERALS[match.group("literal")]


_LITERAL_RULES = (
    ReplacementRule(
        name="nonstandard_literal",
        pattern=_NONSTANDARD_LITERAL_RE,
        replace=_replace_literal,
        diagnostic="Replaced non-JSON literal",
    ),
)


def replace_nonstandard_literals(text: str, options: StepOptions = DEFAULT_OPTIONS) -> StepResult:
    return execute_rules(text, _LITERAL_RULES, "Replaced non-JSON literals", options)


_CONCATENATION_RULES = (
    ReplacementRule(
        name="string_concatenation",
        pattern=_CONCATENATED_LITERALS_RE,
        replace=group_template(r'"\g<a>\g<b>"'),
        diagnostic="Merged concatenated string literals",
    ),
    ReplacementRule(
        name="literal_plus_identifier",
        pattern=_LITERAL_PLUS_IDENTIFIER_RE,
        replace=group_template(r"\g<literal>"),
        diagnostic="Dropped identifier from concatenation",
    ),
    ReplacementRule(
        name="identifier_plus_literal",
        pattern=_IDENTIFIER_PLUS_LITERAL_RE,
        replace=group_template(r"\g<lead>\g<quote>"),
        diagnostic="Dropped identifier from concatenation",
    ),
)


def merge_concatenated_values(text: str, options: StepOptions = DEFAULT_OPTIONS) -> StepResult:
    """Collapse ``"a" + "b"`` chains into one literal; identifiers in a chain are dropped."""
    return execute_rules(text, _CONCATENATION_RULES, "Merged concatenated values", options)


def _quote_value(match: re.Match[str], _: RuleContext) -> str | None:
    value = match.group("value")
    if value in _JSON_KEYWORDS:
        return None
    escaped = value.replace("\\", "\\\\")
    return f'{match.group("lead")}"{escaped}"'


_UNQUOTED_VALUE_RULES = (
    ReplacementRule(
        name="unquoted_value",
        pattern=_UNQUOTED_VALUE_RE,
        replace=_quote_value,
        diagnostic="Quoted bare value",
    ),
)


def quote_unquoted_values(text: str, options: StepOptions = DEFAULT_OPTIONS) -> StepResult:
    return execute_rules(text, _UNQUOTED_VALUE_RULES, "Quoted unquoted values", options)


def _drop_stray_prefix(match: re.Match[str], _: RuleContext) -> str | None:
    if match.group("stray") in _JSON_KEYWORDS:
        return None
    return match.group("lead") + match.group("key")


_STRAY_TEXT_RULES = (
    ReplacementRule(
        name="stray_text_before_property",
        pattern=_STRAY_BEFORE_PROPERTY_RE,
        replace=_drop_stray_prefix,
        diagnostic="Removed stray text before property",
    ),
    ReplacementRule(
        name="stray_text_after_value",
        pattern=_STRAY_AFTER_VALUE_RE,
        replace=group_template(r"\g<value>"),
        diagnostic="Removed stray text after value",
    ),
    ReplacementRule(
        name="corrupted_colon_noise",
        pattern=_CORRUPTED_COLON_RE,
        replace=group_template(r"\g<key>"),
        diagnostic="Removed corrupted text after colon",
    ),
    ReplacementRule(
        name="encoded_number_marker",
        pattern=_CODE_MARKER_RE,
        replace=group_template(r": \g<number>"),
        diagnostic="Decoded numeric marker",
    ),
)


def remove_stray_text(text: str, options: StepOptions = DEFAULT_OPTIONS) -> StepResult:
    return execute_rules(text, _STRAY_TEXT_RULES, "Removed stray text", options)


def fix_invalid_escapes(text: str, options: StepOptions = DEFAULT_OPTIONS) -> StepResult:
    """Make every backslash inside a string a legal JSON escape.

    ``\\'`` becomes ``'`` and ``\\ `` becomes a space; any other unknown escape,
    including an incomplete ``\\u``, gets its backslash doubled.
    """
    out: list[str] = []
    fixes = 0
    in_string = False
    index = 0
    length = len(text)
    while index < length:
        ch = text[index]
        if not in_string:
            if ch == '"':
                in_string = True
            out.append(ch)
            index += 1
            continue
        if ch == '"':
            in_string = False
            out.append(ch)
            index += 1
            continue
        if ch != "\\":
            out.append(ch)
            index += 1
            continue

        following = text[index + 1] if index + 1 < length else ""
        if following and following in _VALID_ESCAPES:
            out.append(text[index : index + 2])
            index += 2
        elif following == "u":
            digits = text[index + 2 : index + 6]
            if len(digits) == 4 and all(d in _HEX_DIGITS for d in digits):
                out.append(text[index : index + 6])
                index += 6
            else:
                out.append("\\\\u")
                fixes += 1
                index += 2
        elif following == "'":
            out.append("'")
            fixes += 1
            index += 2
        elif following == " ":
            out.append(" ")
            fixes += 1
            index += 2
        else:
            out.append("\\\\")
            fixes += 1
            index += 1

    if not fixes:
        return StepResult.unchanged(text)
    return StepResult("".join(out), True, "Fixed invalid escape sequences", (f"fixed {fixes} escape(s)",))
