from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from llm_sanitizer.domain.scanner import PAIRS, StringContext, TokenKind, tokenize


class StructuralContext(StrEnum):
    TOP_LEVEL = "top_level"
    OBJECT = "object"
    ARRAY_OF_OBJECTS = "array_of_objects"
    ARRAY_OF_SCALARS = "array_of_scalars"


@dataclass(frozen=True, slots=True)
class DelimiterCorrection:
    position: int
    found: str
    replacement: str


@dataclass(slots=True)
class OpenerState:
    stack: list[str]
    in_string: bool

    @property
    def closers(self) -> str:
        return "".join(PAIRS[opener] for opener in reversed(self.stack))


def classify_position(text: str, position: int, ctx: StringContext | None = None) -> StructuralContext:
    """Classify the innermost unclosed container around ``position``.

    Scans backward ignoring string content. Brace and bracket depth are
    tracked independently; the first opener found at depth zero decides.
    An array counts as an array of objects when a brace appears between its
    opener and the position.
    """
    ctx = ctx or StringContext(text)
    brace_depth = 0
    bracket_depth = 0
    seen_brace = False
    for index in range(min(position, len(text)) - 1, -1, -1):
        if not ctx.is_structural(index):
            continue
        ch = text[index]
        if ch == "}":
            brace_depth += 1
            seen_brace = True
        elif ch == "{":
            seen_brace = True
            if brace_depth == 0:
                return StructuralContext.OBJECT
            brace_depth -= 1
        elif ch == "]":
            bracket_depth += 1
        elif ch == "[":
            if bracket_depth == 0:
                if seen_brace:
                    return StructuralContext.ARRAY_OF_OBJECTS
                return StructuralContext.ARRAY_OF_SCALARS
            bracket_depth -= 1
    return StructuralContext.TOP_LEVEL


_CONTEXT_BY_CODE = (
    StructuralContext.TOP_LEVEL,
    StructuralContext.OBJECT,
    StructuralContext.ARRAY_OF_OBJECTS,
    StructuralContext.ARRAY_OF_SCALARS,
)


class StructureIndex:
    """``classify_position`` for every offset of one text, built in one forward pass.

    Brace and bracket openers are matched on separate stacks; the later of
    the two unmatched tops is the enclosing container. ``classify(pos)``
    agrees with ``classify_position(text, pos)`` and is O(1).
    """

    __slots__ = ("_codes",)

    def __init__(self, text: str, ctx: StringContext | None = None) -> None:
        ctx = ctx or StringContext(text)
        codes = bytearray(len(text) + 1)
        braces: list[int] = []
        brackets: list[int] = []
        last_brace = -1
        code = 0
        for index, ch in enumerate(text):
            if ch in "{}[]" and not ctx.is_in_string(index):
                if ch == "{":
                    braces.append(index)
                    last_brace = index
                elif ch == "}":
                    last_brace = index
                    if braces:
                        braces.pop()
                elif ch == "[":
                    brackets.append(index)
                elif brackets:
                    brackets.pop()
                brace_top = braces[-1] if braces else -1
                bracket_top = brackets[-1] if brackets else -1
                if brace_top < 0 and bracket_top < 0:
                    code = 0
                elif brace_top > bracket_top:
                    code = 1
                else:
                    code = 2 if last_brace > bracket_top else 3
            codes[index + 1] = code
        self._codes = codes

    def classify(self, position: int) -> StructuralContext:
        position = min(max(position, 0), len(self._codes) - 1)
        return _CONTEXT_BY_CODE[self._codes[position]]


def _next_significant_char(text: str, start: int) -> str:
    for index in range(start, len(text)):
        ch = text[index]
        if ch.isspace() or ch == ",":
            continue
        return ch
    return ""


def find_closer_corrections(text: str) -> list[DelimiterCorrection]:
    corrections: list[DelimiterCorrection] = []
    stack: list[str] = []
    for token in tokenize(text):
        if token.kind != TokenKind.DELIMITER:
            continue
        ch = text[token.start]
        if ch in PAIRS:
            stack.append(ch)
            continue
        if ch not in ("}", "]") or not stack:
            continue
        expected = PAIRS[stack[-1]]
        if ch == expected:
            stack.pop()
            continue
        if (
            expected == "}"
            and ch == "]"
            and len(stack) >= 2
            and stack[-2] == "["
            and _next_significant_char(text, token.end) == '"'
        ):
            # The object inside the array was never closed: close both.
            corrections.append(DelimiterCorrection(token.start, ch, "}]"))
            stack.pop()
            stack.pop()
            continue
        corrections.append(DelimiterCorrection(token.start, ch, expected))
        stack.pop()
    return corrections


def apply_corrections(text: str, corrections: list[DelimiterCorrection]) -> str:
    result = text
    for correction in sorted(corrections, key=lambda item: item.position, reverse=True):
        end = correction.position + len(correction.found)
        result = result[: correction.position] + correction.replacement + result[end:]
    return result


def unclosed_openers(text: str) -> OpenerState:
    """Opener stack left at end of text; mismatched closers pop the top."""
    stack: list[str] = []
    tokens = tokenize(text)
    for token in tokens:
        if token.kind != TokenKind.DELIMITER:
            continue
        ch = text[token.start]
        if ch in PAIRS:
            stack.append(ch)
        elif ch in ("}", "]") and stack:
            stack.pop()
    return OpenerState(stack=stack, in_string=StringContext(text).ends_in_string)
