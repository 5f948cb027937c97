"""Step types and the shared regex rule executor.

Every sanitizer is a function ``(text, options) -> StepResult``. Regex based
sanitizers describe themselves as a list of ``ReplacementRule`` and hand the
work to ``execute_rules``, which computes one ``StringContext`` per rule and
skips matches that start inside a string literal. Context checks read the
enclosing container from a ``StructureIndex`` built at most once per rule.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Callable

from llm_sanitizer.domain.delimiters import StructureIndex
from llm_sanitizer.domain.property_names import DEFAULT_TABLES, PropertyNameTables
from llm_sanitizer.domain.scanner import StringContext


class StepGroup(StrEnum):
    NORMALIZATION = "normalization"
    STRUCTURAL_NOISE = "structural_noise"
    PROPERTY_NAMES = "property_names"
    VALUES = "values"
    STRUCTURAL = "structural"
    DELIMITERS = "delimiters"


@dataclass(frozen=True, slots=True)
class StepOptions:
    tables: PropertyNameTables = DEFAULT_TABLES
    max_diagnostics: int = 20


DEFAULT_OPTIONS = StepOptions()


@dataclass(frozen=True, slots=True)
class StepResult:
    content: str
    changed: bool = False
    description: str = ""
    diagnostics: tuple[str, ...] = ()

    @classmethod
    def unchanged(cls, content: str) -> "StepResult":
        return cls(content=content)


Sanitizer = Callable[[str, StepOptions], StepResult]


@dataclass(frozen=True, slots=True)
class SanitizationStep:
    name: str
    group: StepGroup
    apply: Sanitizer
    fixpoint: bool = False
    max_iterations: int | None = None


@dataclass(slots=True)
class RuleContext:
    text: str
    strings: StringContext
    options: StepOptions
    _structure: StructureIndex | None = None

    @property
    def structure(self) -> StructureIndex:
        """Container classification for ``text``, built on first use."""
        if self._structure is None:
            self._structure = StructureIndex(self.text, self.strings)
        return self._structure


@dataclass(frozen=True, slots=True)
class ReplacementRule:
    name: str
    pattern: re.Pattern[str]
    replace: Callable[[re.Match[str], RuleContext], str | None]
    diagnostic: str
    context_check: Callable[[re.Match[str], RuleContext], bool] | None = None
    skip_in_string: bool = True
    # Group whose start offset decides the string-context check.
    anchor_group: int = 0


def group_template(template: str) -> Callable[[re.Match[str], RuleContext], str]:
    """Replacement that expands a ``\\g<n>`` template."""

    def _replace(match: re.Match[str], _: RuleContext) -> str:
        return match.expand(template)

    return _replace


@dataclass(slots=True)
class DiagnosticCollector:
    limit: int
    items: list[str] = field(default_factory=list)
    dropped: int = 0

    def add(self, message: str) -> None:
        if len(self.items) < self.limit:
            self.items.append(message)
        else:
            self.dropped += 1

    def freeze(self) -> tuple[str, ...]:
        if self.dropped:
            return (*self.items, f"... {self.dropped} more")
        return tuple(self.items)


def _snippet(value: str, limit: int = 40) -> str:
    value = value.replace("\n", "\\n")
    return value if len(value) <= limit else value[: limit - 3] + "..."


def execute_rules(
    text: str,
    rules: list[ReplacementRule] | tuple[ReplacementRule, ...],
    description: str,
    options: StepOptions = DEFAULT_OPTIONS,
) -> StepResult:
    """Apply each rule once over the whole text, in order."""
    collector = DiagnosticCollector(limit=options.max_diagnostics)
    current = text
    for rule in rules:
        context = RuleContext(text=current, strings=StringContext(current), options=options)

        def _substitute(match: re.Match[str], rule: ReplacementRule = rule, context: RuleContext = context) -> str:
            original = match.group(0)
            if rule.skip_in_string and context.strings.is_in_string(match.start(rule.anchor_group)):
                return original
            if rule.context_check is not None and not rule.context_check(match, context):
                return original
            replacement = rule.replace(match, context)
            if replacement is None or replacement == original:
                return original
            collector.add(f"{rule.diagnostic}: {_snippet(original)!r} -> {_snippet(replacement)!r}")
            return replacement

        current = rule.pattern.sub(_substitute, current)

    if current == text:
        return StepResult.unchanged(text)
    return StepResult(content=current, changed=True, description=description, diagnostics=collector.freeze())


def previous_significant_char(text: str, index: int) -> str:
    """First non-whitespace character before ``index``, or ``""``."""
    cursor = index - 1
    while cursor >= 0 and text[cursor].isspace():
        cursor -= 1
    return text[cursor] if cursor >= 0 else ""
