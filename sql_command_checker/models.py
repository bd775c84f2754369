"""Value objects passed between the resolver, validator and emitter.

Everything here is immutable. Positions are 1-based ``(line, column)`` pairs
so they can be shown to users as-is.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

__all__ = [
    "Position",
    "ConstructionSite",
    "Write",
    "VariableBinding",
    "Found",
    "NotFound",
    "Unresolved",
    "ResolvedStatement",
    "Ok",
    "UndefinedTable",
    "UndefinedColumn",
    "OtherSqlError",
    "ValidationOutcome",
    "DiagnosticRecord",
]


@dataclass(frozen=True, order=True)
class Position:
    """A 1-based source location."""

    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class ConstructionSite:
    """A call that instantiates a SQL command object.

    Attributes:
        node: The ``ast.Call`` creating the command.
        position: Position of the whole call expression.
        args: Constructor arguments carrying SQL, in order.
        scope: Ancestors of ``node``, nearest first.
        target: Expression the command object is stored in (``cmd`` or
            ``self.cmd``), if any.
    """

    node: ast.Call
    position: Position
    args: Tuple[ast.expr, ...] = ()
    scope: Tuple[ast.AST, ...] = ()
    target: Optional[ast.expr] = None

    @property
    def line(self) -> int:
        return self.position.line


@dataclass(frozen=True)
class Write:
    """One write of a local name: its declaration or a later reassignment."""

    kind: str
    value: ast.expr
    line: int
    position: Position


@dataclass(frozen=True)
class VariableBinding:
    """A named local with its declaration and reassignments in source order."""

    name: str
    declaration: Write
    reassignments: Tuple[Write, ...] = ()


@dataclass(frozen=True)
class Found:
    text: str
    position: Position


@dataclass(frozen=True)
class NotFound:
    position: Position


@dataclass(frozen=True)
class Unresolved:
    """SQL is only known at run time; nothing to validate."""

    position: Position
    reason: str


ResolvedStatement = Union[Found, NotFound, Unresolved]


@dataclass(frozen=True)
class Ok:
    pass


@dataclass(frozen=True)
class UndefinedTable:
    name: str


@dataclass(frozen=True)
class UndefinedColumn:
    name: str


@dataclass(frozen=True)
class OtherSqlError:
    message: str


ValidationOutcome = Union[Ok, UndefinedTable, UndefinedColumn, OtherSqlError]


@dataclass(frozen=True)
class DiagnosticRecord:
    """A warning attached to a source position."""

    rule_id: str
    severity: str
    message: str
    position: Position
    path: str = "<unknown>"
    additional_positions: Tuple[Position, ...] = field(default_factory=tuple)

    def to_json(self) -> dict:
        return {
            "rule_id": self.rule_id,
            "severity": self.severity,
            "message": self.message,
            "path": self.path,
            "line": self.position.line,
            "column": self.position.column,
            "additional_locations": [
                {"line": p.line, "column": p.column} for p in self.additional_positions
            ],
        }

    def __str__(self) -> str:
        return f"{self.path}:{self.position}: {self.severity} {self.rule_id}: {self.message}"
