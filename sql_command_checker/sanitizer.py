"""Turn string literals into SQL the database can parse.

The resolver works on decoded literal values, so escapes and implicit
concatenation are already handled by the parser; only named parameters need
neutralising. :func:`sanitize` covers callers that only have the raw token.

Example:
    >>> neutralize_parameters("SELECT * FROM t WHERE id = @id")
    'SELECT * FROM t WHERE id = NULL'
"""

from __future__ import annotations

import re

__all__ = ["sanitize", "neutralize_parameters"]

_QUOTES = ("'", '"')


def sanitize(literal_text: str) -> str:
    """Return the raw SQL inside the source token ``literal_text``.

    ``literal_text`` is the token as written in source, e.g. ``"SELECT 1"`` or
    ``r'SELECT 1'``. One leading decoration character (the opening quote or
    the raw-string prefix) is dropped and every remaining delimiter quote is
    removed. Whitespace and escape sequences are left alone.
    """

    token = literal_text.strip()
    delimiter = next((ch for ch in token if ch in _QUOTES), '"')
    return token[1:].replace(delimiter, "")


def neutralize_parameters(sql: str, marker: str = "@") -> str:
    """Replace named parameters such as ``@id`` with ``NULL``."""

    return re.sub(re.escape(marker) + r"\w+", "NULL", sql)
