"""Python syntax-tree access for the checker.

``SourceModel`` wraps :mod:`ast` and answers the questions the resolver asks:
where are the command constructions, which statements are visible from a
node, and what is the 1-based position of a node.

Example:
    >>> model = SourceModel('cmd = Command("SELECT 1")\\n')
    >>> [s.position for s in model.construction_sites("Command")]
    [Position(line=1, column=7)]
"""

from __future__ import annotations

import ast
import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from .models import ConstructionSite, Position

__all__ = ["SourceModel", "call_name", "receiver_key"]

log = logging.getLogger(__name__)

_FRAMES = (ast.FunctionDef, ast.AsyncFunctionDef, ast.Lambda, ast.ClassDef, ast.Module)


def receiver_key(node: Optional[ast.AST]) -> Optional[Tuple[str, ...]]:
    """Return ``("self", "cmd")`` for ``self.cmd``, ``("cmd",)`` for ``cmd``.

    Load and store contexts give the same key. ``None`` for anything that is
    not a plain name or attribute chain.
    """
    if isinstance(node, ast.Name):
        return (node.id,)
    if isinstance(node, ast.Attribute):
        base = receiver_key(node.value)
        return base + (node.attr,) if base is not None else None
    return None


def call_name(call: ast.Call) -> Optional[str]:
    """Return the bare callee name of ``call`` (``Command`` for ``db.Command()``)."""
    func = call.func
    if isinstance(func, ast.Name):
        return func.id
    if isinstance(func, ast.Attribute):
        return func.attr
    return None


class SourceModel:
    """Read-only view over one parsed compilation unit."""

    def __init__(self, source: str, path: str = "<string>") -> None:
        self.source = source
        self.path = path
        self.tree = ast.parse(source, filename=path)
        self._parents: Dict[ast.AST, ast.AST] = {}
        for parent in ast.walk(self.tree):
            for child in ast.iter_child_nodes(parent):
                self._parents[child] = parent

    @classmethod
    def from_file(cls, path: str | Path) -> "SourceModel":
        path = Path(path)
        log.debug("Parsing %s", path)
        return cls(path.read_text(encoding="utf-8"), str(path))

    # ------------------------------------------------------------------
    # positions and text
    # ------------------------------------------------------------------
    def position(self, node: ast.AST) -> Position:
        """Return the 1-based position of ``node``."""
        return Position(node.lineno, node.col_offset + 1)

    def segment(self, node: ast.AST) -> str:
        """Return the exact source text of ``node``."""
        return ast.get_source_segment(self.source, node) or ""

    # ------------------------------------------------------------------
    # traversal
    # ------------------------------------------------------------------
    def ancestors(self, node: ast.AST) -> List[ast.AST]:
        """Return the ancestors of ``node``, nearest first."""
        chain = []
        current = self._parents.get(node)
        while current is not None:
            chain.append(current)
            current = self._parents.get(current)
        return chain

    def enclosing_frame(self, scope: Sequence[ast.AST]) -> Optional[ast.AST]:
        """Return the nearest function, class or module in ``scope``."""
        return next((a for a in scope if isinstance(a, _FRAMES)), None)

    def scope_statements(self, scope: Sequence[ast.AST]) -> Iterator[ast.stmt]:
        """Yield the statements directly held by each ancestor in ``scope``.

        Ancestors are visited nearest first and each ancestor's statements in
        source order. A statement is yielded once even when reachable twice.
        """
        for frame in self.scope_frames(scope):
            yield from frame

    def scope_frames(self, scope: Sequence[ast.AST]) -> List[List[ast.stmt]]:
        """Group :meth:`scope_statements` by enclosing function/class/module.

        The first group holds the statements of the innermost frame.
        """
        seen: set[int] = set()
        frames: List[List[ast.stmt]] = [[]]
        for ancestor in scope:
            for _, value in ast.iter_fields(ancestor):
                if not isinstance(value, list):
                    continue
                for child in value:
                    if isinstance(child, ast.stmt) and id(child) not in seen:
                        seen.add(id(child))
                        frames[-1].append(child)
            if isinstance(ancestor, _FRAMES):
                frames.append([])
        return [f for f in frames if f]

    # ------------------------------------------------------------------
    # construction sites
    # ------------------------------------------------------------------
    def construction_sites(
        self, type_name: str, text_property: str = "command_text"
    ) -> List[ConstructionSite]:
        """Return every call constructing ``type_name``, in source order.

        The callee name is compared case-insensitively. A keyword argument
        named like the text property counts as a constructor argument.
        """
        wanted = type_name.lower()
        sites = []
        for node in ast.walk(self.tree):
            if not isinstance(node, ast.Call):
                continue
            name = call_name(node)
            if name is None or name.lower() != wanted:
                continue
            args = list(node.args)
            args.extend(
                kw.value
                for kw in node.keywords
                if kw.arg is not None and kw.arg.lower() == text_property.lower()
            )
            sites.append(
                ConstructionSite(
                    node=node,
                    position=self.position(node),
                    args=tuple(args),
                    scope=tuple(self.ancestors(node)),
                    target=self._bound_target(node),
                )
            )
        sites.sort(key=lambda s: s.position)
        log.debug("Found %d %s construction(s) in %s", len(sites), type_name, self.path)
        return sites

    def _bound_target(self, call: ast.Call) -> Optional[ast.expr]:
        """Return the name or attribute ``call``'s result is stored in, if any."""
        parent = self._parents.get(call)
        if isinstance(parent, ast.Assign) and len(parent.targets) == 1:
            target = parent.targets[0]
        elif isinstance(parent, ast.AnnAssign):
            target = parent.target
        elif isinstance(parent, ast.withitem):
            target = parent.optional_vars
        else:
            return None
        return target if receiver_key(target) is not None else None
