"""Settings for a checker run.

Values come from, in order of precedence: explicit arguments, environment
variables, then a ``KEY=VALUE`` file (``#`` comments and blank lines are
ignored). The connection URL is read from ``SQL_CHECKER_DATABASE_URL`` and
falls back to ``DATABASE_URL``.

Example:
    >>> settings = load_settings(config_file="checker.env")
    >>> settings.command_type
    'Command'
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from dotenv import dotenv_values

__all__ = ["CheckerSettings", "load_settings", "read_config_file"]

log = logging.getLogger(__name__)

URL_KEYS = ("SQL_CHECKER_DATABASE_URL", "DATABASE_URL")


@dataclass
class CheckerSettings:
    """Resolved settings.

    Attributes:
        database_url: SQLAlchemy URL of the schema to validate against.
        command_type: Name of the command class to look for.
        text_property: Attribute holding a command's SQL text.
        parameter_marker: Character introducing named parameters.
        parallelism: Number of sites validated at once.
        pool_size: Connections kept between validations, ``0`` for none.
    """

    database_url: str
    command_type: str = "Command"
    text_property: str = "command_text"
    parameter_marker: str = "@"
    parallelism: int = 4
    pool_size: int = 0


def read_config_file(path: Optional[str]) -> Dict[str, str]:
    """Return the ``KEY=VALUE`` pairs of ``path`` (empty if ``path`` is ``None``)."""
    if not path:
        return {}
    if not os.path.exists(path):
        raise ValueError(f"Config file not found: {path}")
    values = {k: (v or "").strip() for k, v in dotenv_values(path).items()}
    log.debug("Loaded %d setting(s) from %s", len(values), path)
    return values


def _lookup(key: str, file_values: Mapping[str, str], default: str = "") -> str:
    value = os.getenv(key)
    if value is None or not value.strip():
        value = file_values.get(key, default)
    return value.strip()


def load_settings(
    database_url: Optional[str] = None,
    config_file: Optional[str] = None,
    **overrides: object,
) -> CheckerSettings:
    """Build :class:`CheckerSettings` from arguments, environment and file.

    Raises:
        ValueError: If no database URL can be determined.
    """
    file_values = read_config_file(config_file)
    url = (database_url or "").strip()
    candidates = [os.getenv(k) for k in URL_KEYS] + [file_values.get(k) for k in URL_KEYS]
    for candidate in candidates:
        if url:
            break
        url = (candidate or "").strip()
    if not url:
        raise ValueError("DATABASE_URL not set")

    settings = CheckerSettings(
        database_url=url,
        command_type=_lookup("SQL_CHECKER_COMMAND_TYPE", file_values, "Command"),
        text_property=_lookup("SQL_CHECKER_TEXT_PROPERTY", file_values, "command_text"),
        parameter_marker=_lookup("SQL_CHECKER_PARAMETER_MARKER", file_values, "@"),
        parallelism=int(_lookup("SQL_CHECKER_PARALLELISM", file_values, "4")),
        pool_size=int(_lookup("SQL_CHECKER_POOL_SIZE", file_values, "0")),
    )
    for key, value in overrides.items():
        if value is not None:
            setattr(settings, key, value)
    return settings
