"""Lexer for the Pascal subset.

Produces tokens one at a time from source text. Whitespace and both
comment forms (``{ ... }`` and ``(* ... *)``) are skipped; keywords are
recognized case-insensitively.
"""

from __future__ import annotations

from collections.abc import Iterator

from pasparse.errors import LexError
from pasparse.source import Position
from pasparse.tokens import KEYWORDS, SINGLE_CHAR_TOKENS, Token, TokenKind


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


class Lexer:
    """Tokenizes Pascal source code."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.pos = 0
        self.line = 1
        self.col = 1

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens up to and including EOF."""
        while True:
            tok = self.next_token()
            yield tok
            if tok.kind == TokenKind.EOF:
                return

    def lex(self) -> list[Token]:
        """Tokenize the entire source and return the token list."""
        return list(self)

    def next_token(self) -> Token:
        """Return the next token. Keeps returning EOF once the input is exhausted."""
        self._skip_trivia()
        start = self._position()
        if self._at_end():
            return Token(TokenKind.EOF, "", start, start)

        ch = self.source[self.pos]
        if _is_digit(ch):
            return self._lex_number(start)
        if ch == "'":
            return self._lex_string(start)
        if ch.isalpha() or ch == "_":
            return self._lex_identifier(start)
        return self._lex_operator_or_punct(start)

    # ── Helpers ───────────────────────────────────────────────────

    def _at_end(self) -> bool:
        return self.pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return "\0"

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def _position(self) -> Position:
        return Position(self.line, self.col, self.pos)

    def _emit(self, kind: TokenKind, value: str, start: Position) -> Token:
        return Token(kind, value, start, self._position())

    def _error(self, message: str, start: Position) -> LexError:
        char = self.source[start.offset] if start.offset < len(self.source) else ""
        return LexError(message, char, start.line, start.column, start.offset)

    # ── Whitespace and comments ──────────────────────────────────

    def _skip_trivia(self) -> None:
        while not self._at_end():
            ch = self.source[self.pos]
            if ch.isspace():
                self._advance()
            elif ch == "{":
                self._skip_brace_comment()
            elif ch == "(" and self._peek(1) == "*":
                self._skip_paren_comment()
            else:
                return

    def _skip_brace_comment(self) -> None:
        self._advance()  # {
        while not self._at_end():
            if self._advance() == "}":
                return

    def _skip_paren_comment(self) -> None:
        self._advance()  # (
        self._advance()  # *
        while not self._at_end():
            if self.source[self.pos] == "*" and self._peek(1) == ")":
                self._advance()
                self._advance()
                return
            self._advance()

    # ── Literals ─────────────────────────────────────────────────

    def _lex_number(self, start: Position) -> Token:
        text = []
        while not self._at_end() and _is_digit(self.source[self.pos]):
            text.append(self._advance())

        # '.' is part of the number only when a digit follows it
        if self._peek() == "." and _is_digit(self._peek(1)):
            text.append(self._advance())
            while not self._at_end() and _is_digit(self.source[self.pos]):
                text.append(self._advance())
        return self._emit(TokenKind.NUMBER, "".join(text), start)

    def _lex_string(self, start: Position) -> Token:
        self._advance()  # opening '
        text = []
        while not self._at_end():
            ch = self._advance()
            if ch != "'":
                text.append(ch)
            elif self._peek() == "'":
                self._advance()
                text.append("'")
            else:
                return self._emit(TokenKind.STRING_LITERAL, "".join(text), start)
        raise self._error("Unterminated string literal", start)

    def _lex_identifier(self, start: Position) -> Token:
        text = []
        while not self._at_end():
            ch = self.source[self.pos]
            if not (ch.isalpha() or _is_digit(ch) or ch == "_"):
                break
            text.append(self._advance())
        word = "".join(text)
        kind = KEYWORDS.get(word.lower(), TokenKind.IDENTIFIER)
        return self._emit(kind, word, start)

    # ── Operators and punctuation ────────────────────────────────

    def _lex_operator_or_punct(self, start: Position) -> Token:
        ch = self.source[self.pos]
        nxt = self._peek(1)

        match ch:
            case "<":
                if nxt == ">":
                    return self._two(TokenKind.NOT_EQUALS, start)
                if nxt == "=":
                    return self._two(TokenKind.LESS_EQUALS, start)
                self._advance()
                return self._emit(TokenKind.LESS_THAN, "<", start)
            case ">":
                if nxt == "=":
                    return self._two(TokenKind.GREATER_EQUALS, start)
                self._advance()
                return self._emit(TokenKind.GREATER_THAN, ">", start)
            case ":":
                if nxt == "=":
                    return self._two(TokenKind.ASSIGN, start)
                self._advance()
                return self._emit(TokenKind.COLON, ":", start)

        kind = SINGLE_CHAR_TOKENS.get(ch)
        if kind is None:
            raise self._error(f"Unexpected character {ch!r}", start)
        self._advance()
        return self._emit(kind, ch, start)

    def _two(self, kind: TokenKind, start: Position) -> Token:
        text = self._advance() + self._advance()
        return self._emit(kind, text, start)
