import os
from pathlib import Path
from typing import Iterable, Iterator

__all__ = ["limit_parallelism", "iter_python_files"]

_SKIP_DIRS = {".git", ".venv", "venv", "__pycache__", "node_modules", ".tox"}


def limit_parallelism(requested: int, sites: int = 1, pool_size: int | None = None) -> int:
    """Return how many sites may be validated at once.

    Every in-flight validation holds one database session, so the result
    never exceeds ``MAX_DB_CONCURRENT_LIMIT_ALL`` (default ``450``), the
    number of ``sites`` to check, or ``pool_size`` when a pool is used::

        min(requested, sites, pool_size, MAX_DB_CONCURRENT_LIMIT_ALL)
    """

    max_total = int(os.getenv("MAX_DB_CONCURRENT_LIMIT_ALL", "450"))
    allowed = min(max(requested, 1), max(sites, 1), max_total)
    if pool_size:
        allowed = min(allowed, pool_size)
    return max(allowed, 1)


def iter_python_files(paths: Iterable[str | Path]) -> Iterator[Path]:
    """Yield ``*.py`` files under ``paths`` in a stable order."""

    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            for child in sorted(path.rglob("*.py")):
                if not _SKIP_DIRS.intersection(child.relative_to(path).parts):
                    yield child
        else:
            yield path
