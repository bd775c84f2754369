"""Per-site pipeline: resolve, validate, emit.

``CommandAnalyzer`` owns no mutable state besides the sink it reports to, so
``analyze_site`` may be called for independent sites from several threads.

Example:
    >>> analyzer = CommandAnalyzer(SQLValidator(url), CollectingSink())
    >>> analyzer.analyze_source('Command("SELECT * FROM missing")\\n', "demo.py")
    [DiagnosticRecord(rule_id='PSCA1001', ...)]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from .emitter import CollectingSink, DiagnosticSink, emit
from .models import ConstructionSite, DiagnosticRecord, Found, Unresolved
from .resolver import StatementResolver
from .source_model import SourceModel

__all__ = ["CommandAnalyzer", "FileJob"]

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileJob:
    """A parsed file and the construction sites found in it."""

    model: SourceModel
    resolver: StatementResolver
    sites: List[ConstructionSite]


class CommandAnalyzer:
    """Check every command construction against a database schema."""

    def __init__(
        self,
        validator,
        sink: Optional[DiagnosticSink] = None,
        command_type: str = "Command",
        text_property: str = "command_text",
        marker: str = "@",
    ) -> None:
        """Create the analyzer.

        Args:
            validator: Object with ``validate(sql)`` returning an outcome.
            sink: Receives diagnostics, a :class:`CollectingSink` by default.
            command_type: Class name of the command object.
            text_property: Attribute a command's SQL can be assigned to.
            marker: Character introducing named parameters.
        """
        self.validator = validator
        self.sink = sink if sink is not None else CollectingSink()
        self.command_type = command_type
        self.text_property = text_property
        self.marker = marker

    def prepare(self, model: SourceModel) -> FileJob:
        resolver = StatementResolver(model, self.text_property, self.marker)
        sites = model.construction_sites(self.command_type, self.text_property)
        return FileJob(model, resolver, sites)

    def analyze_site(self, job: FileJob, site: ConstructionSite) -> Optional[DiagnosticRecord]:
        """Resolve ``site``, validate its SQL and report at most one diagnostic.

        Raises:
            FatalValidationError: If the database cannot be reached.
        """
        resolved = job.resolver.resolve(site)
        if isinstance(resolved, Unresolved):
            log.debug("%s:%s skipped: %s", job.model.path, resolved.position, resolved.reason)
            return None
        outcome = None
        if isinstance(resolved, Found):
            outcome = self.validator.validate(resolved.text)
        return emit(resolved, outcome, self.sink, job.model.path)

    def analyze_model(self, model: SourceModel) -> List[DiagnosticRecord]:
        """Check all sites of ``model`` one after another."""
        job = self.prepare(model)
        records = []
        for site in job.sites:
            record = self.analyze_site(job, site)
            if record is not None:
                records.append(record)
        return records

    def analyze_source(self, source: str, path: str = "<string>") -> List[DiagnosticRecord]:
        return self.analyze_model(SourceModel(source, path))
