"""Token kinds and token representation for the Pascal lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pasparse.source import Position


class TokenKind(Enum):
    # Keywords
    PROGRAM = auto()
    BEGIN = auto()
    END = auto()
    VAR = auto()
    PROCEDURE = auto()
    FUNCTION = auto()
    IF = auto()
    THEN = auto()
    ELSE = auto()
    WHILE = auto()
    DO = auto()
    FOR = auto()
    TO = auto()
    DOWNTO = auto()

    # Type names
    INTEGER = auto()
    REAL = auto()
    STRING = auto()
    BOOLEAN = auto()

    # Literals
    NUMBER = auto()
    STRING_LITERAL = auto()
    TRUE = auto()
    FALSE = auto()

    # Identifiers
    IDENTIFIER = auto()

    # Punctuation
    SEMICOLON = auto()
    COLON = auto()
    COMMA = auto()
    DOT = auto()
    ASSIGN = auto()
    LPAREN = auto()
    RPAREN = auto()

    # Operators
    PLUS = auto()
    MINUS = auto()
    MULTIPLY = auto()
    DIVIDE = auto()
    EQUALS = auto()
    NOT_EQUALS = auto()
    LESS_THAN = auto()
    GREATER_THAN = auto()
    LESS_EQUALS = auto()
    GREATER_EQUALS = auto()

    # Special
    EOF = auto()


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    location: Position | None = None
    end: Position | None = None  # just past the last source character


KEYWORDS: dict[str, TokenKind] = {
    "program": TokenKind.PROGRAM,
    "begin": TokenKind.BEGIN,
    "end": TokenKind.END,
    "var": TokenKind.VAR,
    "procedure": TokenKind.PROCEDURE,
    "function": TokenKind.FUNCTION,
    "if": TokenKind.IF,
    "then": TokenKind.THEN,
    "else": TokenKind.ELSE,
    "while": TokenKind.WHILE,
    "do": TokenKind.DO,
    "for": TokenKind.FOR,
    "to": TokenKind.TO,
    "downto": TokenKind.DOWNTO,
    "integer": TokenKind.INTEGER,
    "real": TokenKind.REAL,
    "string": TokenKind.STRING,
    "boolean": TokenKind.BOOLEAN,
    "true": TokenKind.TRUE,
    "false": TokenKind.FALSE,
}

TYPE_NAMES: frozenset[TokenKind] = frozenset({
    TokenKind.INTEGER,
    TokenKind.REAL,
    TokenKind.STRING,
    TokenKind.BOOLEAN,
})

SINGLE_CHAR_TOKENS: dict[str, TokenKind] = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.MULTIPLY,
    "/": TokenKind.DIVIDE,
    "=": TokenKind.EQUALS,
    ";": TokenKind.SEMICOLON,
    ",": TokenKind.COMMA,
    ".": TokenKind.DOT,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
}
