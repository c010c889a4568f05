"""pasparse: a lexer and recursive-descent parser for a subset of Pascal."""

from pasparse.errors import LexError, ParseError, PascalError
from pasparse.parser import ParseResult, is_valid, parse, try_parse

__version__ = "0.1.0"

__all__ = [
    "LexError",
    "ParseError",
    "ParseResult",
    "PascalError",
    "is_valid",
    "parse",
    "try_parse",
]
