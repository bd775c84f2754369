"""Trace a local name back to the write that most likely feeds a command.

This is a heuristic, not a data-flow solve. The writes of the name are taken
from the innermost function, class or module that assigns it, in source
order; the first is the declaration, the rest are reassignments. A :class:`SelectionPolicy` then picks
one of them. The default :class:`LineDistancePolicy` prefers the reassignment
closest in line number to the reference, but only when it is strictly closer
than the declaration. Reassignments that come *after* the reference are still
candidates.
"""

from __future__ import annotations

import ast
import logging
from typing import Iterable, List, Optional, Sequence

from .models import VariableBinding, Write
from .source_model import SourceModel

__all__ = [
    "UnresolvedBindingError",
    "SelectionPolicy",
    "LineDistancePolicy",
    "BindingTracer",
]

log = logging.getLogger(__name__)


class UnresolvedBindingError(LookupError):
    """Raised when no write of a name is visible from the reference point."""

    def __init__(self, name: str, line: int) -> None:
        super().__init__(f"no assignment of {name!r} visible from line {line}")
        self.name = name
        self.line = line


class SelectionPolicy:
    """Decides between the current pick and the next candidate write."""

    def prefer(self, current: Write, candidate: Write, reference_line: int) -> bool:
        raise NotImplementedError

    def accept(self, declaration: Write, best: Write, reference_line: int) -> bool:
        """Return ``True`` if ``best`` should win over ``declaration``."""
        raise NotImplementedError


class LineDistancePolicy(SelectionPolicy):
    """Nearest write by absolute line distance; ties go to the earlier write."""

    @staticmethod
    def distance(write: Write, reference_line: int) -> int:
        return abs(reference_line - write.line)

    def prefer(self, current: Write, candidate: Write, reference_line: int) -> bool:
        return self.distance(candidate, reference_line) < self.distance(current, reference_line)

    def accept(self, declaration: Write, best: Write, reference_line: int) -> bool:
        return self.distance(best, reference_line) < self.distance(declaration, reference_line)


class BindingTracer:
    """Find the write of a local name that a command most likely uses."""

    def __init__(self, model: SourceModel, policy: Optional[SelectionPolicy] = None) -> None:
        self.model = model
        self.policy = policy or LineDistancePolicy()

    def binding(self, name: str, reference_line: int, scope: Sequence[ast.AST]) -> VariableBinding:
        """Return the declaration and reassignments of ``name`` seen from ``scope``.

        Raises:
            UnresolvedBindingError: If ``name`` is never assigned in ``scope``.
        """
        writes: List[Write] = []
        for statements in self.model.scope_frames(scope):
            writes = self._writes(name, statements)
            if writes:
                break
        if not writes:
            raise UnresolvedBindingError(name, reference_line)
        writes.sort(key=lambda w: w.position)
        declaration = writes[0]
        declaration = Write("declaration", declaration.value, declaration.line, declaration.position)
        return VariableBinding(name, declaration, tuple(writes[1:]))

    def resolve_variable(self, name: str, reference_line: int, scope: Sequence[ast.AST]) -> Write:
        """Return the write of ``name`` selected for ``reference_line``."""
        binding = self.binding(name, reference_line, scope)
        chosen = self.select(binding, reference_line)
        log.debug(
            "%s at line %d resolved to %s on line %d",
            name,
            reference_line,
            chosen.kind,
            chosen.line,
        )
        return chosen

    def select(self, binding: VariableBinding, reference_line: int) -> Write:
        """Walk the candidates in order and keep the policy's favourite."""
        if not binding.reassignments:
            return binding.declaration
        best = binding.reassignments[0]
        for candidate in binding.reassignments[1:]:
            if self.policy.prefer(best, candidate, reference_line):
                best = candidate
        if self.policy.accept(binding.declaration, best, reference_line):
            return best
        return binding.declaration

    def _writes(self, name: str, statements: Iterable[ast.stmt]) -> List[Write]:
        writes = []
        for stmt in statements:
            value = _assigned_value(stmt, name)
            if value is None:
                continue
            writes.append(
                Write("assignment", value, stmt.lineno, self.model.position(value))
            )
        return writes


def _assigned_value(stmt: ast.stmt, name: str) -> Optional[ast.expr]:
    """Return the right-hand side if ``stmt`` is ``name = value``."""
    if isinstance(stmt, ast.Assign):
        if any(isinstance(t, ast.Name) and t.id == name for t in stmt.targets):
            return stmt.value
    elif isinstance(stmt, ast.AnnAssign) and stmt.value is not None:
        if isinstance(stmt.target, ast.Name) and stmt.target.id == name:
            return stmt.value
    return None
