"""String-context scanning for near-JSON text.

A double quote toggles the string state only when the run of backslashes
immediately before it has even length. ``StringContext`` computes that state
once for every offset so sanitizers can ask ``is_in_string`` in O(1).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


DELIMITERS = frozenset("{}[],:")
OPENERS = frozenset("{[")
CLOSERS = frozenset("}]")
PAIRS = {"{": "}", "[": "]"}


class TokenKind(StrEnum):
    STRING = "string"
    DELIMITER = "delimiter"
    WHITESPACE = "whitespace"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class Token:
    kind: TokenKind
    start: int
    end: int

    def text(self, source: str) -> str:
        return source[self.start : self.end]


def _is_unescaped_quote(text: str, index: int) -> bool:
    if text[index] != '"':
        return False
    backslashes = 0
    cursor = index - 1
    while cursor >= 0 and text[cursor] == "\\":
        backslashes += 1
        cursor -= 1
    return backslashes % 2 == 0


def is_in_string(position: int, text: str) -> bool:
    """Return True when ``position`` lies inside a double-quoted literal.

    The opening quote itself is outside; the character after it is inside.
    """
    in_string = False
    for index in range(min(position, len(text))):
        if _is_unescaped_quote(text, index):
            in_string = not in_string
    return in_string


class StringContext:
    """Precomputed in-string mask for one text."""

    __slots__ = ("text", "_mask")

    def __init__(self, text: str) -> None:
        self.text = text
        mask = bytearray(len(text) + 1)
        in_string = False
        backslashes = 0
        for index, ch in enumerate(text):
            if ch == '"' and backslashes % 2 == 0:
                in_string = not in_string
            backslashes = backslashes + 1 if ch == "\\" else 0
            mask[index + 1] = in_string
        self._mask = mask

    def is_in_string(self, position: int) -> bool:
        if position <= 0:
            return False
        return bool(self._mask[min(position, len(self._mask) - 1)])

    def is_structural(self, position: int) -> bool:
        """True when the character at ``position`` is outside every string and is not a quote."""
        if position < 0 or position >= len(self.text):
            return False
        return not self.is_in_string(position) and self.text[position] != '"'

    @property
    def ends_in_string(self) -> bool:
        return bool(self._mask[-1])


def tokenize(text: str) -> list[Token]:
    """Split text into string, delimiter, whitespace and other runs."""
    tokens: list[Token] = []
    length = len(text)
    index = 0
    while index < length:
        ch = text[index]
        if ch == '"' and _is_unescaped_quote(text, index):
            cursor = index + 1
            while cursor < length:
                if text[cursor] == "\\":
                    cursor += 2
                    continue
                if text[cursor] == '"':
                    cursor += 1
                    break
                cursor += 1
            else:
                cursor = length
            end = min(cursor, length)
            tokens.append(Token(TokenKind.STRING, index, end))
            index = end
        elif ch in DELIMITERS:
            tokens.append(Token(TokenKind.DELIMITER, index, index + 1))
            index += 1
        elif ch.isspace():
            cursor = index + 1
            while cursor < length and text[cursor].isspace():
                cursor += 1
            tokens.append(Token(TokenKind.WHITESPACE, index, cursor))
            index = cursor
        else:
            cursor = index + 1
            while cursor < length and text[cursor] not in DELIMITERS and text[cursor] != '"' and not text[cursor].isspace():
                cursor += 1
            tokens.append(Token(TokenKind.OTHER, index, cursor))
            index = cursor
    return tokens


def untokenize(text: str, tokens: list[Token]) -> str:
    return "".join(token.text(text) for token in tokens)


def structural_delimiters(text: str) -> list[tuple[int, str]]:
    """Positions and characters of every delimiter outside strings."""
    return [
        (token.start, text[token.start])
        for token in tokenize(text)
        if token.kind == TokenKind.DELIMITER
    ]
