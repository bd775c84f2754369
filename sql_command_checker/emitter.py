"""Turn resolution and validation results into diagnostics.

A sink is anything with a ``report(record)`` method. Two are provided:
:class:`CollectingSink` keeps records in memory and :class:`ConsoleSink`
prints them as they arrive.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import List, Optional, Protocol

import typer

from . import rules
from .models import (
    DiagnosticRecord,
    Found,
    NotFound,
    Ok,
    OtherSqlError,
    ResolvedStatement,
    UndefinedColumn,
    UndefinedTable,
    ValidationOutcome,
)

__all__ = ["DiagnosticSink", "CollectingSink", "ConsoleSink", "emit", "to_record"]

log = logging.getLogger(__name__)


class DiagnosticSink(Protocol):
    def report(self, record: DiagnosticRecord) -> None: ...


class CollectingSink:
    """Keep reported diagnostics in a list; safe to share between threads."""

    def __init__(self) -> None:
        self.records: List[DiagnosticRecord] = []
        self._lock = threading.Lock()

    def report(self, record: DiagnosticRecord) -> None:
        with self._lock:
            self.records.append(record)


class ConsoleSink(CollectingSink):
    """Echo each diagnostic as a ``path:line:col`` line or a JSON object."""

    def __init__(self, as_json: bool = False) -> None:
        super().__init__()
        self.as_json = as_json

    def report(self, record: DiagnosticRecord) -> None:
        with self._lock:
            self.records.append(record)
            typer.echo(json.dumps(record.to_json()) if self.as_json else str(record))


def to_record(
    resolved: ResolvedStatement,
    outcome: Optional[ValidationOutcome],
    path: str = "<unknown>",
) -> Optional[DiagnosticRecord]:
    """Return the diagnostic for a resolved site, or ``None`` when clean."""
    if isinstance(resolved, NotFound):
        rule, args = rules.MISSING_STATEMENT, ()
    elif not isinstance(resolved, Found) or outcome is None or isinstance(outcome, Ok):
        return None
    elif isinstance(outcome, UndefinedTable):
        rule, args = rules.UNDEFINED_TABLE, (outcome.name,)
    elif isinstance(outcome, UndefinedColumn):
        rule, args = rules.UNDEFINED_COLUMN, (outcome.name,)
    elif isinstance(outcome, OtherSqlError):
        rule, args = rules.BAD_STATEMENT, (outcome.message,)
    else:
        raise TypeError(f"unknown validation outcome {outcome!r}")
    return DiagnosticRecord(
        rule_id=rule.id,
        severity=rule.severity,
        message=rule.message(*args),
        position=resolved.position,
        path=path,
    )


def emit(
    resolved: ResolvedStatement,
    outcome: Optional[ValidationOutcome],
    sink: DiagnosticSink,
    path: str = "<unknown>",
) -> Optional[DiagnosticRecord]:
    """Report at most one diagnostic for a site to ``sink``."""
    record = to_record(resolved, outcome, path)
    if record is not None:
        log.debug("Reporting %s at %s:%s", record.rule_id, path, record.position)
        sink.report(record)
    return record
