from __future__ import annotations

import re

from llm_sanitizer.domain.delimiters import StructuralContext
from llm_sanitizer.sanitizers.base import (
    DEFAULT_OPTIONS,
    ReplacementRule,
    RuleContext,
    StepOptions,
    StepResult,
    execute_rules,
    group_template,
    previous_significant_char,
)


_IDENT = r"[A-Za-z_$][\w$]*"
_STRING_BODY = r'(?:[^"\\\n]|\\.)*'

_SINGLE_QUOTED_NAME_RE = re.compile(r"(?P<lead>[{,]\s*)'(?P<name>[A-Za-z_$][\w$-]*)'(?P<colon>\s*:)")
_UNQUOTED_NAME_RE = re.compile(rf"(?P<lead>(?:[{{,]|^)\s*)(?P<name>{_IDENT})(?P<colon>\s*:)", re.MULTILINE)
_MISSING_OPEN_QUOTE_RE = re.compile(rf'(?P<lead>(?:[{{,]|^)\s*)(?P<name>{_IDENT})"(?P<colon>\s*:)', re.MULTILINE)
_MISSING_CLOSE_QUOTE_RE = re.compile(
    rf'(?P<lead>[{{,]\s*)"(?P<name>{_IDENT})(?P<colon>[ \t]*:[ \t]*)(?=["\d\[{{-]|true\b|false\b|null\b)'
)
_CONCATENATED_NAME_RE = re.compile(
    rf'"(?P<a>{_STRING_BODY})"\s*\+\s*"(?P<b>{_STRING_BODY})"(?=(?:\s*\+\s*"{_STRING_BODY}")*\s*:)'
)
_QUOTED_NAME_RE = re.compile(rf'(?P<lead>[{{,]\s*)"(?P<name>{_IDENT})"(?P<colon>\s*:)')
_KEY_BEFORE_VALUE_RE = re.compile(
    r'(?P<key>"[A-Za-z_$][\w$\- ]*")(?P<gap>[ \t]+)(?=["\[{]|-?\d|true\b|false\b|null\b)'
)


def _in_object(match: re.Match[str], context: RuleContext) -> bool:
    position = match.end("lead") if "lead" in match.re.groupindex else match.start()
    return context.structure.classify(position) == StructuralContext.OBJECT


def _at_property_position(match: re.Match[str], context: RuleContext) -> bool:
    return previous_significant_char(context.text, match.start()) in ("", "{", ",") and _in_object(match, context)


_QUOTING_RULES = (
    ReplacementRule(
        name="single_quoted_property_name",
        pattern=_SINGLE_QUOTED_NAME_RE,
        replace=group_template(r'\g<lead>"\g<name>"\g<colon>'),
        diagnostic="Converted single-quoted property name",
    ),
    ReplacementRule(
        name="unquoted_property_name",
        pattern=_UNQUOTED_NAME_RE,
        replace=group_template(r'\g<lead>"\g<name>"\g<colon>'),
        diagnostic="Quoted bare property name",
    ),
    ReplacementRule(
        name="missing_opening_quote",
        pattern=_MISSING_OPEN_QUOTE_RE,
        replace=group_template(r'\g<lead>"\g<name>"\g<colon>'),
        diagnostic="Added missing opening quote to property name",
    ),
    ReplacementRule(
        name="missing_closing_quote",
        pattern=_MISSING_CLOSE_QUOTE_RE,
        replace=group_template(r'\g<lead>"\g<name>"\g<colon>'),
        diagnostic="Added missing closing quote to property name",
        context_check=_in_object,
    ),
)


def quote_property_names(text: str, options: StepOptions = DEFAULT_OPTIONS) -> StepResult:
    return execute_rules(text, _QUOTING_RULES, "Fixed property name quoting", options)


def _is_property_concatenation(match: re.Match[str], context: RuleContext) -> bool:
    return previous_significant_char(context.text, match.start()) in ("", "{", ",")


_CONCATENATION_RULES = (
    ReplacementRule(
        name="concatenated_property_name",
        pattern=_CONCATENATED_NAME_RE,
        replace=group_template(r'"\g<a>\g<b>"'),
        diagnostic="Merged concatenated property name",
        context_check=_is_property_concatenation,
    ),
)


def merge_concatenated_property_names(text: str, options: StepOptions = DEFAULT_OPTIONS) -> StepResult:
    return execute_rules(text, _CONCATENATION_RULES, "Merged concatenated property names", options)


def _replace_truncated(match: re.Match[str], context: RuleContext) -> str | None:
    canonical = context.options.tables.canonical_for_truncation(match.group("name"))
    if not canonical:
        return None
    return f'{match.group("lead")}"{canonical}"{match.group("colon")}'


def _replace_typo(match: re.Match[str], context: RuleContext) -> str | None:
    canonical = context.options.tables.canonical_for_typo(match.group("name"))
    if not canonical:
        return None
    return f'{match.group("lead")}"{canonical}"{match.group("colon")}'


_TRUNCATION_RULES = (
    ReplacementRule(
        name="truncated_property_name",
        pattern=_QUOTED_NAME_RE,
        replace=_replace_truncated,
        diagnostic="Restored truncated property name",
    ),
)

_TYPO_RULES = (
    ReplacementRule(
        name="property_name_typo",
        pattern=_QUOTED_NAME_RE,
        replace=_replace_typo,
        diagnostic="Fixed property name typo",
    ),
)


def fix_truncated_property_names(text: str, options: StepOptions = DEFAULT_OPTIONS) -> StepResult:
    """Replace known truncated names (``"eferences"``) with their canonical form.

    Only names found in the configured table are touched; nothing is guessed.
    """
    return execute_rules(text, _TRUNCATION_RULES, "Restored truncated property names", options)


def fix_property_name_typos(text: str, options: StepOptions = DEFAULT_OPTIONS) -> StepResult:
    return execute_rules(text, _TYPO_RULES, "Fixed property name typos", options)


_COLON_RULES = (
    ReplacementRule(
        name="missing_property_colon",
        pattern=_KEY_BEFORE_VALUE_RE,
        replace=group_template(r"\g<key>:\g<gap>"),
        diagnostic="Inserted missing colon after property name",
        context_check=_at_property_position,
    ),
)


def add_missing_property_colons(text: str, options: StepOptions = DEFAULT_OPTIONS) -> StepResult:
    return execute_rules(text, _COLON_RULES, "Inserted missing property colons", options)
