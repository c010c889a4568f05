"""AST node definitions for the Pascal subset.

Nodes are frozen dataclasses; child sequences are tuples so a tree cannot
be mutated after the parser builds it. Each node family is a closed
``Union`` meant to be consumed with ``match``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Literal, Union

from pasparse.source import ZERO_LOCATION, SourceLocation

# ── Expressions ──────────────────────────────────────────────────


@dataclass(frozen=True)
class Identifier:
    type: ClassVar[str] = "Identifier"
    name: str
    location: SourceLocation = ZERO_LOCATION


@dataclass(frozen=True)
class NumericLiteral:
    type: ClassVar[str] = "NumericLiteral"
    value: int | float
    location: SourceLocation = ZERO_LOCATION


@dataclass(frozen=True)
class StringLiteral:
    type: ClassVar[str] = "StringLiteral"
    value: str
    location: SourceLocation = ZERO_LOCATION


@dataclass(frozen=True)
class BooleanLiteral:
    type: ClassVar[str] = "BooleanLiteral"
    value: bool
    location: SourceLocation = ZERO_LOCATION


@dataclass(frozen=True)
class BinaryExpression:
    type: ClassVar[str] = "BinaryExpression"
    operator: str
    left: Expression
    right: Expression
    location: SourceLocation = ZERO_LOCATION


@dataclass(frozen=True)
class UnaryExpression:
    type: ClassVar[str] = "UnaryExpression"
    operator: str
    argument: Expression
    location: SourceLocation = ZERO_LOCATION


@dataclass(frozen=True)
class CallExpression:
    type: ClassVar[str] = "CallExpression"
    callee: str
    arguments: tuple[Expression, ...]
    location: SourceLocation = ZERO_LOCATION


Expression = Union[
    BinaryExpression, UnaryExpression, Identifier,
    NumericLiteral, StringLiteral, BooleanLiteral, CallExpression,
]


# ── Statements ───────────────────────────────────────────────────


@dataclass(frozen=True)
class AssignmentStatement:
    type: ClassVar[str] = "AssignmentStatement"
    left: Identifier
    right: Expression
    location: SourceLocation = ZERO_LOCATION


@dataclass(frozen=True)
class IfStatement:
    type: ClassVar[str] = "IfStatement"
    condition: Expression
    then_branch: Statement
    else_branch: Statement | None = None
    location: SourceLocation = ZERO_LOCATION


@dataclass(frozen=True)
class WhileStatement:
    type: ClassVar[str] = "WhileStatement"
    condition: Expression
    body: Statement
    location: SourceLocation = ZERO_LOCATION


@dataclass(frozen=True)
class ForStatement:
    type: ClassVar[str] = "ForStatement"
    variable: Identifier
    start: Expression
    end: Expression
    body: Statement
    direction: Literal["to", "downto"]
    location: SourceLocation = ZERO_LOCATION


@dataclass(frozen=True)
class CallStatement:
    type: ClassVar[str] = "CallStatement"
    name: str
    arguments: tuple[Expression, ...]
    location: SourceLocation = ZERO_LOCATION


@dataclass(frozen=True)
class CompoundStatement:
    type: ClassVar[str] = "CompoundStatement"
    statements: tuple[Statement, ...]
    location: SourceLocation = ZERO_LOCATION


Statement = Union[
    AssignmentStatement, IfStatement, WhileStatement,
    ForStatement, CallStatement, CompoundStatement,
]


# ── Declarations ─────────────────────────────────────────────────


@dataclass(frozen=True)
class Parameter:
    type: ClassVar[str] = "Parameter"
    name: str
    param_type: str
    is_var: bool
    location: SourceLocation = ZERO_LOCATION


@dataclass(frozen=True)
class Block:
    type: ClassVar[str] = "Block"
    statements: tuple[Statement, ...]
    declarations: tuple[Declaration, ...] = ()  # local declarations of a routine body
    location: SourceLocation = ZERO_LOCATION


@dataclass(frozen=True)
class VariableDeclaration:
    type: ClassVar[str] = "VariableDeclaration"
    name: str
    var_type: str
    location: SourceLocation = ZERO_LOCATION


@dataclass(frozen=True)
class FunctionDeclaration:
    type: ClassVar[str] = "FunctionDeclaration"
    name: str
    parameters: tuple[Parameter, ...]
    return_type: str
    body: Block | None = None
    location: SourceLocation = ZERO_LOCATION


@dataclass(frozen=True)
class ProcedureDeclaration:
    type: ClassVar[str] = "ProcedureDeclaration"
    name: str
    parameters: tuple[Parameter, ...]
    body: Block | None = None
    location: SourceLocation = ZERO_LOCATION


Declaration = Union[VariableDeclaration, FunctionDeclaration, ProcedureDeclaration]


@dataclass(frozen=True)
class Program:
    type: ClassVar[str] = "Program"
    name: str
    declarations: tuple[Declaration, ...]
    statements: tuple[Statement, ...]
    location: SourceLocation = ZERO_LOCATION


Node = Union[Program, Declaration, Parameter, Block, Statement, Expression]
