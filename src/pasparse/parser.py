"""Parser for the Pascal subset.

Transforms a token stream into an AST using recursive descent for
programs, declarations and statements, and a binding-power table for
expressions. Parsing stops at the first error.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Literal

from pasparse.ast_nodes import (
    AssignmentStatement,
    BinaryExpression,
    Block,
    BooleanLiteral,
    CallExpression,
    CallStatement,
    CompoundStatement,
    Declaration,
    Expression,
    ForStatement,
    FunctionDeclaration,
    Identifier,
    IfStatement,
    NumericLiteral,
    Parameter,
    ProcedureDeclaration,
    Program,
    Statement,
    StringLiteral,
    UnaryExpression,
    VariableDeclaration,
    WhileStatement,
)
from pasparse.errors import ParseError
from pasparse.lexer import Lexer
from pasparse.source import ZERO_LOCATION, ZERO_POSITION, Position, SourceLocation
from pasparse.tokens import TYPE_NAMES, Token, TokenKind

# ── Binding powers ──────────────────────────────────────────────

# (left_bp, right_bp) for infix operators
_INFIX_BP: dict[TokenKind, tuple[int, int]] = {
    TokenKind.EQUALS: (1, 2),
    TokenKind.NOT_EQUALS: (1, 2),
    TokenKind.LESS_THAN: (1, 2),
    TokenKind.GREATER_THAN: (1, 2),
    TokenKind.LESS_EQUALS: (1, 2),
    TokenKind.GREATER_EQUALS: (1, 2),
    TokenKind.PLUS: (3, 4),
    TokenKind.MINUS: (3, 4),
    TokenKind.MULTIPLY: (5, 6),
    TokenKind.DIVIDE: (5, 6),
}

_PREFIX_BP = 7  # right bp for unary + and -

_RELATIONAL = frozenset({
    TokenKind.EQUALS, TokenKind.NOT_EQUALS,
    TokenKind.LESS_THAN, TokenKind.GREATER_THAN,
    TokenKind.LESS_EQUALS, TokenKind.GREATER_EQUALS,
})

_MAX_NESTING = 200


class Parser:
    """Parses a stream of tokens into a Pascal ``Program``.

    Tokens are pulled lazily from ``tokens``; at most two tokens of
    lookahead are buffered. A stream that ends without an EOF token is
    treated as if it had one.
    """

    def __init__(self, tokens: Iterable[Token]) -> None:
        self._tokens = iter(tokens)
        self._buffer: list[Token] = []
        self._previous: Token | None = None
        self._depth = 0

    # ── Token access ─────────────────────────────────────────────

    def peek(self, offset: int = 0) -> Token:
        while len(self._buffer) <= offset:
            self._buffer.append(self._pull())
        return self._buffer[offset]

    def _pull(self) -> Token:
        if self._buffer and self._buffer[-1].kind == TokenKind.EOF:
            return self._buffer[-1]
        tok = next(self._tokens, None)
        if tok is not None:
            return tok
        last = self._buffer[-1] if self._buffer else self._previous
        pos = last.end if last is not None else None
        return Token(TokenKind.EOF, "", pos, pos)

    def is_at_end(self) -> bool:
        return self.peek().kind == TokenKind.EOF

    def advance(self) -> Token:
        tok = self.peek()
        if tok.kind != TokenKind.EOF:
            self._buffer.pop(0)
        self._previous = tok
        return tok

    def check(self, kind: TokenKind) -> bool:
        if self.is_at_end():
            return False
        return self.peek().kind == kind

    def match(self, *kinds: TokenKind) -> bool:
        for kind in kinds:
            if self.check(kind):
                self.advance()
                return True
        return False

    def consume(self, kind: TokenKind, message: str) -> Token:
        if self.check(kind):
            return self.advance()
        raise self._error(message)

    def _consume_keyword(self, kind: TokenKind, text: str) -> Token:
        tok = self.peek()
        if tok.kind == kind and tok.value.lower() == text:
            return self.advance()
        raise self._error(f"Expected '{text}'")

    def _error(self, message: str, tok: Token | None = None) -> ParseError:
        tok = tok or self.peek()
        return ParseError(message, self._token_location(tok))

    @contextmanager
    def _nested(self) -> Iterator[None]:
        self._depth += 1
        try:
            if self._depth > _MAX_NESTING:
                raise self._error("Nesting too deep")
            yield
        finally:
            self._depth -= 1

    # ── Locations ────────────────────────────────────────────────

    @staticmethod
    def _start_of(tok: Token) -> Position:
        return tok.location or ZERO_POSITION

    @staticmethod
    def _end_of(tok: Token) -> Position:
        return tok.end or tok.location or ZERO_POSITION

    @staticmethod
    def _span(start: Position, end: Position) -> SourceLocation:
        if start == ZERO_POSITION or end == ZERO_POSITION:
            return ZERO_LOCATION
        return SourceLocation(start, end)

    def _token_location(self, tok: Token) -> SourceLocation:
        return self._span(self._start_of(tok), self._end_of(tok))

    def _since(self, start: Token | Position) -> SourceLocation:
        """Span from ``start`` to the end of the last consumed token."""
        if isinstance(start, Token):
            start = self._start_of(start)
        end = self._end_of(self._previous) if self._previous else ZERO_POSITION
        return self._span(start, end)

    # ── Program and blocks ───────────────────────────────────────

    def parse(self) -> Program:
        """Parse the entire token stream into a Program."""
        start = self.peek()
        self._consume_keyword(TokenKind.PROGRAM, "program")
        name = self.consume(TokenKind.IDENTIFIER, "Expected program name").value
        self.consume(TokenKind.SEMICOLON, "Expected ';' after program name")
        declarations = self._parse_declarations()
        block = self._parse_block()
        self.consume(TokenKind.DOT, "Expected '.' at end of program")
        location = self._since(start)
        if not self.is_at_end():
            raise self._error("Expected end of input after '.'")
        return Program(name, declarations, block.statements, location)

    def _parse_block(
        self,
        declarations: tuple[Declaration, ...] = (),
        start: Position | None = None,
    ) -> Block:
        begin = self._consume_keyword(TokenKind.BEGIN, "begin")
        statements = self._parse_statement_list()
        self._consume_keyword(TokenKind.END, "end")
        return Block(statements, declarations, self._since(start or begin))

    def _parse_statement_list(self) -> tuple[Statement, ...]:
        statements: list[Statement] = []
        while not self.check(TokenKind.END):
            if self.is_at_end() or self.check(TokenKind.DOT):
                raise self._error("Expected 'end'")
            statements.append(self._parse_statement())
        return tuple(statements)

    # ── Declarations ─────────────────────────────────────────────

    def _parse_declarations(self) -> tuple[Declaration, ...]:
        declarations: list[Declaration] = []
        while True:
            if self.check(TokenKind.VAR):
                declarations.extend(self._parse_var_section())
            elif self.check(TokenKind.PROCEDURE):
                declarations.append(self._parse_procedure())
            elif self.check(TokenKind.FUNCTION):
                declarations.append(self._parse_function())
            else:
                return tuple(declarations)

    def _parse_var_section(self) -> list[VariableDeclaration]:
        self.advance()  # 'var'
        declarations: list[VariableDeclaration] = []
        while True:
            names = self._parse_identifier_list("Expected variable name")
            self.consume(TokenKind.COLON, "Expected ':' after variable names")
            type_tok = self._parse_type_name()
            self.consume(TokenKind.SEMICOLON, "Expected ';' after variable declaration")
            for name_tok in names:
                declarations.append(VariableDeclaration(
                    name_tok.value, type_tok.value,
                    self._span(self._start_of(name_tok), self._end_of(type_tok)),
                ))
            if not self.check(TokenKind.IDENTIFIER):
                return declarations

    def _parse_procedure(self) -> ProcedureDeclaration:
        start = self.advance()  # 'procedure'
        name = self.consume(TokenKind.IDENTIFIER, "Expected procedure name").value
        parameters = self._parse_parameters()
        self.consume(TokenKind.SEMICOLON, "Expected ';' after procedure heading")
        body = self._parse_routine_body()
        self.consume(TokenKind.SEMICOLON, "Expected ';' after procedure body")
        return ProcedureDeclaration(name, parameters, body, self._since(start))

    def _parse_function(self) -> FunctionDeclaration:
        start = self.advance()  # 'function'
        name = self.consume(TokenKind.IDENTIFIER, "Expected function name").value
        parameters = self._parse_parameters()
        self.consume(TokenKind.COLON, "Expected ':' before function return type")
        return_type = self._parse_type_name().value
        self.consume(TokenKind.SEMICOLON, "Expected ';' after function heading")
        body = self._parse_routine_body()
        self.consume(TokenKind.SEMICOLON, "Expected ';' after function body")
        return FunctionDeclaration(name, parameters, return_type, body, self._since(start))

    def _parse_routine_body(self) -> Block:
        start = self._start_of(self.peek())
        with self._nested():
            declarations = self._parse_declarations()
            return self._parse_block(declarations, start)

    def _parse_parameters(self) -> tuple[Parameter, ...]:
        if not self.match(TokenKind.LPAREN):
            return ()
        parameters: list[Parameter] = []
        if self.match(TokenKind.RPAREN):
            return ()
        while True:
            group_start = self.peek()
            is_var = self.match(TokenKind.VAR)
            names = self._parse_identifier_list("Expected parameter name")
            self.consume(TokenKind.COLON, "Expected ':' after parameter names")
            type_tok = self._parse_type_name()
            for name_tok in names:
                start = group_start if is_var else name_tok
                parameters.append(Parameter(
                    name_tok.value, type_tok.value, is_var,
                    self._span(self._start_of(start), self._end_of(type_tok)),
                ))
            if not self.match(TokenKind.SEMICOLON):
                break
        self.consume(TokenKind.RPAREN, "Expected ')' after parameters")
        return tuple(parameters)

    def _parse_identifier_list(self, message: str) -> list[Token]:
        names = [self.consume(TokenKind.IDENTIFIER, message)]
        while self.match(TokenKind.COMMA):
            names.append(self.consume(TokenKind.IDENTIFIER, message))
        return names

    def _parse_type_name(self) -> Token:
        tok = self.peek()
        if tok.kind in TYPE_NAMES or tok.kind == TokenKind.IDENTIFIER:
            return self.advance()
        raise self._error("Expected type name")

    # ── Statements ───────────────────────────────────────────────

    def _parse_statement(self) -> Statement:
        tok = self.peek()
        with self._nested():
            match tok.kind:
                case TokenKind.IF:
                    return self._parse_if()
                case TokenKind.WHILE:
                    return self._parse_while()
                case TokenKind.FOR:
                    return self._parse_for()
                case TokenKind.BEGIN:
                    return self._parse_compound()
                case TokenKind.IDENTIFIER:
                    after = self.peek(1)
                    if after.kind == TokenKind.LPAREN:
                        stmt: Statement = self._parse_call_statement()
                    elif after.kind == TokenKind.ASSIGN:
                        stmt = self._parse_assignment()
                    else:
                        raise self._error(f"Expected '(' or ':=' after '{tok.value}'", after)
                    self._parse_terminator()
                    return stmt
        raise self._error("Expected statement")

    def _parse_terminator(self) -> None:
        """Consume the ';' ending a simple statement; it may be left out before 'else'."""
        if self.check(TokenKind.ELSE):
            return
        self.consume(TokenKind.SEMICOLON, "Expected ';' after statement")

    def _parse_call_statement(self) -> CallStatement:
        name_tok = self.advance()
        self.consume(TokenKind.LPAREN, f"Expected '(' after '{name_tok.value}'")
        arguments = self._parse_arguments()
        return CallStatement(name_tok.value, arguments, self._since(name_tok))

    def _parse_assignment(self) -> AssignmentStatement:
        name_tok = self.advance()
        target = Identifier(name_tok.value, self._token_location(name_tok))
        self.consume(TokenKind.ASSIGN, "Expected ':='")
        value = self._parse_expression()
        return AssignmentStatement(target, value, self._since(name_tok))

    def _parse_if(self) -> IfStatement:
        start = self.advance()  # 'if'
        condition = self._parse_expression()
        self.consume(TokenKind.THEN, "Expected 'then' after if condition")
        then_branch = self._parse_statement()
        else_branch = None
        if self.match(TokenKind.ELSE):
            else_branch = self._parse_statement()
        return IfStatement(condition, then_branch, else_branch, self._since(start))

    def _parse_while(self) -> WhileStatement:
        start = self.advance()  # 'while'
        condition = self._parse_expression()
        self.consume(TokenKind.DO, "Expected 'do' after while condition")
        body = self._parse_statement()
        return WhileStatement(condition, body, self._since(start))

    def _parse_for(self) -> ForStatement:
        start = self.advance()  # 'for'
        var_tok = self.consume(TokenKind.IDENTIFIER, "Expected loop variable after 'for'")
        variable = Identifier(var_tok.value, self._token_location(var_tok))
        self.consume(TokenKind.ASSIGN, "Expected ':=' after loop variable")
        first = self._parse_expression()
        direction: Literal["to", "downto"]
        if self.match(TokenKind.TO):
            direction = "to"
        elif self.match(TokenKind.DOWNTO):
            direction = "downto"
        else:
            raise self._error("Expected 'to' or 'downto'")
        last = self._parse_expression()
        self.consume(TokenKind.DO, "Expected 'do' after for range")
        body = self._parse_statement()
        return ForStatement(variable, first, last, body, direction, self._since(start))

    def _parse_compound(self) -> CompoundStatement:
        start = self.advance()  # 'begin'
        statements = self._parse_statement_list()
        self._consume_keyword(TokenKind.END, "end")
        location = self._since(start)
        self.match(TokenKind.SEMICOLON)
        return CompoundStatement(statements, location)

    def _parse_arguments(self) -> tuple[Expression, ...]:
        """Parse a call's argument list; the '(' is already consumed."""
        if self.match(TokenKind.RPAREN):
            return ()
        arguments = [self._parse_expression()]
        while self.match(TokenKind.COMMA):
            arguments.append(self._parse_expression())
        self.consume(TokenKind.RPAREN, "Expected ')' after arguments")
        return tuple(arguments)

    # ── Expressions ──────────────────────────────────────────────

    def _parse_expression(self, min_bp: int = 0) -> Expression:
        with self._nested():
            left = self._parse_prefix()
            compared = False

            while True:
                tok = self.peek()
                if tok.kind not in _INFIX_BP:
                    break
                left_bp, right_bp = _INFIX_BP[tok.kind]
                if left_bp < min_bp:
                    break
                if tok.kind in _RELATIONAL:
                    if compared:
                        raise self._error("Comparison operators cannot be chained", tok)
                    compared = True
                self.advance()
                right = self._parse_expression(right_bp)
                left = BinaryExpression(
                    tok.value, left, right,
                    self._span(left.location.start, right.location.end),
                )

            return left

    def _parse_prefix(self) -> Expression:
        tok = self.peek()
        match tok.kind:
            case TokenKind.PLUS | TokenKind.MINUS:
                self.advance()
                operand = self._parse_expression(_PREFIX_BP)
                return UnaryExpression(tok.value, operand, self._since(tok))
            case TokenKind.NUMBER:
                self.advance()
                try:
                    value = float(tok.value) if "." in tok.value else int(tok.value)
                except ValueError:
                    raise self._error("Integer literal too large", tok) from None
                return NumericLiteral(value, self._token_location(tok))
            case TokenKind.STRING_LITERAL:
                self.advance()
                return StringLiteral(tok.value, self._token_location(tok))
            case TokenKind.TRUE | TokenKind.FALSE:
                self.advance()
                return BooleanLiteral(tok.kind == TokenKind.TRUE, self._token_location(tok))
            case TokenKind.IDENTIFIER:
                self.advance()
                if self.match(TokenKind.LPAREN):
                    arguments = self._parse_arguments()
                    return CallExpression(tok.value, arguments, self._since(tok))
                return Identifier(tok.value, self._token_location(tok))
            case TokenKind.LPAREN:
                self.advance()
                expr = self._parse_expression()
                self.consume(TokenKind.RPAREN, "Expected ')' after expression")
                return replace(expr, location=self._since(tok))
        raise self._error("Expected expression")


# ── Public API ───────────────────────────────────────────────────


def parse(source: str) -> Program:
    """Parse Pascal source into a Program. Raises ParseError (or LexError)."""
    return Parser(Lexer(source)).parse()


def is_valid(source: str) -> bool:
    """Return True if ``parse`` accepts the source."""
    try:
        parse(source)
    except ParseError:
        return False
    return True


@dataclass(frozen=True)
class ParseResult:
    """Outcome of ``try_parse``: exactly one of ``program`` and ``error`` is set."""

    program: Program | None = None
    error: ParseError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Program:
        if self.error is not None:
            raise self.error
        assert self.program is not None
        return self.program


def try_parse(source: str) -> ParseResult:
    """Parse without raising; failures are returned as ``ParseResult.error``."""
    try:
        return ParseResult(program=parse(source))
    except ParseError as e:
        return ParseResult(error=e)
