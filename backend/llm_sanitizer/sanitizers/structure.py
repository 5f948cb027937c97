"""Repairs for array elements that lost their object wrapper or values."""

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

_ORPHAN_PROPERTY_RE = re.compile(
    rf'(?P<lead>\}}\s*,)(?P<gap>\s*)(?:"(?P<quoted>{_IDENT})"|(?P<bare>{_IDENT})")(?P<colon>\s*:)'
)
_STRAY_PREFIXED_VALUE_RE = re.compile(
    r'(?P<lead>\}\s*,)(?P<gap>\s*)[A-Za-z_]{1,4}"(?P<value>[^"\\\n{}\[\]]+)"(?=\s*,)'
)
_UNOPENED_VALUE_RE = re.compile(r'(?P<lead>\}\s*,)(?P<gap>\s*)(?P<value>[A-Za-z_][\w .\-]*?)"(?=\s*,)')

_DANGLING_NAME_RE = re.compile(
    rf'(?P<lead>[{{,]\s*)"(?P<name>{_IDENT}) ?"(?=[ \t]*(?:[,}}]|\r?\n(?!\s*:)))'
)
_DANGLING_COLON_RE = re.compile(rf'(?P<key>"{_IDENT}"\s*:)(?=\s*[,}}])')


def _in_array_of_objects(match: re.Match[str], context: RuleContext) -> bool:
    position = match.end("lead")
    return context.structure.classify(position) == StructuralContext.ARRAY_OF_OBJECTS


def _in_object(match: re.Match[str], context: RuleContext) -> bool:
    position = match.end("lead") if "lead" in match.re.groupindex else match.start()
    return context.structure.classify(position) == StructuralContext.OBJECT


def _open_orphan_property(match: re.Match[str], _: RuleContext) -> str:
    name = match.group("quoted") or match.group("bare")
    return f'{match.group("lead")}{match.group("gap")}{{"{name}"{match.group("colon")}'


_OPENER_RULES = (
    ReplacementRule(
        name="missing_object_opener",
        pattern=_ORPHAN_PROPERTY_RE,
        replace=_open_orphan_property,
        diagnostic="Inserted missing opening brace for array element",
        context_check=_in_array_of_objects,
    ),
)


def insert_missing_object_openers(text: str, options: StepOptions = DEFAULT_OPTIONS) -> StepResult:
    return execute_rules(text, _OPENER_RULES, "Inserted missing object openers", options)


_WRAPPER_RULES = (
    ReplacementRule(
        name="stray_prefixed_element",
        pattern=_STRAY_PREFIXED_VALUE_RE,
        replace=group_template(r'\g<lead>\g<gap>{"name": "\g<value>"'),
        diagnostic="Rebuilt array element wrapper",
        context_check=_in_array_of_objects,
    ),
    ReplacementRule(
        name="unopened_element",
        pattern=_UNOPENED_VALUE_RE,
        replace=group_template(r'\g<lead>\g<gap>{"name": "\g<value>"'),
        diagnostic="Rebuilt array element wrapper",
        context_check=_in_array_of_objects,
    ),
)


def reconstruct_array_element_wrappers(text: str, options: StepOptions = DEFAULT_OPTIONS) -> StepResult:
    """Turn ``}, ab"Widget",`` inside an array of objects into ``}, {"name": "Widget",``."""
    return execute_rules(text, _WRAPPER_RULES, "Reconstructed array element wrappers", options)


def _dangling_colon_at_property(match: re.Match[str], context: RuleContext) -> bool:
    return previous_significant_char(context.text, match.start()) in ("{", ",") and _in_object(match, context)


_DANGLING_RULES = (
    ReplacementRule(
        name="dangling_property_name",
        pattern=_DANGLING_NAME_RE,
        replace=group_template(r'\g<lead>"\g<name>": null'),
        diagnostic="Filled dangling property with null",
        context_check=_in_object,
    ),
    ReplacementRule(
        name="dangling_property_colon",
        pattern=_DANGLING_COLON_RE,
        replace=group_template(r"\g<key> null"),
        diagnostic="Filled missing value with null",
        context_check=_dangling_colon_at_property,
    ),
)


def fill_dangling_properties(text: str, options: StepOptions = DEFAULT_OPTIONS) -> StepResult:
    """Give a property that lost its value an explicit ``null``; values are never guessed."""
    return execute_rules(text, _DANGLING_RULES, "Filled dangling properties", options)
