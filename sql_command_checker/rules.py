"""Diagnostic rules reported by the checker."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

__all__ = [
    "Rule",
    "BAD_STATEMENT",
    "UNDEFINED_TABLE",
    "UNDEFINED_COLUMN",
    "MISSING_STATEMENT",
    "RULES",
]

WARNING = "warning"


@dataclass(frozen=True)
class Rule:
    """Descriptor of one diagnostic rule.

    Attributes:
        id: Stable rule identifier.
        title: Short human readable title.
        message_format: ``str.format`` template for the message.
        category: Rule category.
        severity: Always ``warning``.
    """

    id: str
    title: str
    message_format: str
    category: str = "Usage"
    severity: str = WARNING

    def message(self, *args: str) -> str:
        return self.message_format.format(*args)


BAD_STATEMENT = Rule("PSCA1000", "Bad SQL statement.", "{0}")
UNDEFINED_TABLE = Rule("PSCA1001", "Undefined table.", "Table '{0}' does not exist.")
UNDEFINED_COLUMN = Rule("PSCA1002", "Undefined column.", "Column '{0}' does not exist.")
MISSING_STATEMENT = Rule(
    "PSCA1100",
    "Missing statement.",
    "Provide a SQL statement via the constructor or the command text property.",
)

RULES: Dict[str, Rule] = {
    r.id: r for r in (BAD_STATEMENT, UNDEFINED_TABLE, UNDEFINED_COLUMN, MISSING_STATEMENT)
}
