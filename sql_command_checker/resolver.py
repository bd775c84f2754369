"""Work out which SQL text a construction site will be given.

Every site falls into exactly one shape:

``LiteralArg``
    ``Command("SELECT ...")``
``VariableArg``
    ``Command(query)``
``NoArgPropertyAssignment``
    ``cmd = Command()`` followed somewhere in scope by ``cmd.command_text = ...``
``NoArgNoAssignment``
    ``Command()`` with no text ever assigned

Anything else (f-strings, call results, attributes) is only known at run time
and resolves to :class:`~sql_command_checker.models.Unresolved`.
"""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from .binding_tracer import BindingTracer, UnresolvedBindingError
from .models import ConstructionSite, Found, NotFound, Position, ResolvedStatement, Unresolved
from .sanitizer import neutralize_parameters
from .source_model import SourceModel, receiver_key

__all__ = [
    "LiteralArg",
    "VariableArg",
    "NoArgPropertyAssignment",
    "NoArgNoAssignment",
    "OtherArg",
    "StatementResolver",
]

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class LiteralArg:
    literal: ast.Constant


@dataclass(frozen=True)
class VariableArg:
    name: str


@dataclass(frozen=True)
class NoArgPropertyAssignment:
    assignment: ast.Assign


@dataclass(frozen=True)
class NoArgNoAssignment:
    pass


@dataclass(frozen=True)
class OtherArg:
    expr: ast.expr


SiteShape = Union[LiteralArg, VariableArg, NoArgPropertyAssignment, NoArgNoAssignment, OtherArg]


def _is_string_literal(node: ast.AST) -> bool:
    return isinstance(node, ast.Constant) and isinstance(node.value, str)


class StatementResolver:
    """Resolve construction sites of one :class:`SourceModel`."""

    def __init__(
        self,
        model: SourceModel,
        text_property: str = "command_text",
        marker: str = "@",
        tracer: Optional[BindingTracer] = None,
    ) -> None:
        self.model = model
        self.text_property = text_property
        self.marker = marker
        self.tracer = tracer or BindingTracer(model)

    def classify(self, site: ConstructionSite) -> SiteShape:
        """Return the shape of ``site``."""
        if site.args:
            arg = site.args[0]
            if _is_string_literal(arg):
                return LiteralArg(arg)
            if isinstance(arg, ast.Name):
                return VariableArg(arg.id)
            return OtherArg(arg)
        assignment = self._property_assignment(site)
        if assignment is not None:
            return NoArgPropertyAssignment(assignment)
        return NoArgNoAssignment()

    def resolve(self, site: ConstructionSite) -> ResolvedStatement:
        """Return the SQL text and position used at ``site``."""
        shape = self.classify(site)
        log.debug("Site %s:%s classified as %s", self.model.path, site.position, type(shape).__name__)

        if isinstance(shape, LiteralArg):
            return Found(self._extract(shape.literal), site.position)
        if isinstance(shape, VariableArg):
            return self._trace(shape.name, site.line, site.scope, site.position)
        if isinstance(shape, NoArgPropertyAssignment):
            value = shape.assignment.value
            if _is_string_literal(value):
                return Found(self._extract(value), self.model.position(value))
            if isinstance(value, ast.Name):
                return self._trace(
                    value.id,
                    shape.assignment.lineno,
                    self.model.ancestors(shape.assignment),
                    self.model.position(value),
                )
            return Unresolved(self.model.position(value), "text property assigned a dynamic value")
        if isinstance(shape, NoArgNoAssignment):
            return NotFound(site.position)
        return Unresolved(self.model.position(shape.expr), "statement built at run time")

    # ------------------------------------------------------------------
    # internal helpers
    # ------------------------------------------------------------------
    def _extract(self, literal: ast.Constant) -> str:
        return neutralize_parameters(literal.value, self.marker)

    def _trace(
        self,
        name: str,
        reference_line: int,
        scope: Sequence[ast.AST],
        fallback: Position,
    ) -> ResolvedStatement:
        try:
            write = self.tracer.resolve_variable(name, reference_line, scope)
        except UnresolvedBindingError as err:
            log.debug("Skipping %s:%s: %s", self.model.path, fallback, err)
            return Unresolved(fallback, str(err))
        if not _is_string_literal(write.value):
            return Unresolved(write.position, f"{name!r} is not bound to a string literal")
        return Found(self._extract(write.value), write.position)

    def _property_assignment(self, site: ConstructionSite) -> Optional[ast.Assign]:
        """Return the first ``<target>.<text property> = ...`` in the site's frame.

        The whole enclosing function (or module) is searched, including
        nested blocks. The receiver must be the expression the command was
        stored in, e.g. ``cmd`` or ``self.cmd``.
        """
        receiver = receiver_key(site.target)
        frame = self.model.enclosing_frame(site.scope)
        if receiver is None or frame is None:
            return None
        wanted = self.text_property.lower()
        matches = []
        for node in ast.walk(frame):
            if not isinstance(node, ast.Assign):
                continue
            for target in node.targets:
                if (
                    isinstance(target, ast.Attribute)
                    and target.attr.lower() == wanted
                    and receiver_key(target.value) == receiver
                ):
                    matches.append(node)
                    break
        if not matches:
            return None
        return min(matches, key=lambda s: (s.lineno, s.col_offset))
