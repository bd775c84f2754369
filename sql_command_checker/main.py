"""CLI entrypoints for the SQL command checker."""

__all__ = ["app", "check", "rules_cmd"]

import logging
from typing import List, Optional

import typer

from .analyzer import CommandAnalyzer
from .config import load_settings
from .emitter import ConsoleSink
from .logger import Settings, init_logger
from .rules import RULES
from .site_pool import SitePool
from .source_model import SourceModel
from .sql_validator import FatalValidationError, SQLValidator
from .utils import iter_python_files

log = logging.getLogger("sql_command_checker.main")
app = typer.Typer(add_completion=False, help="Validate SQL command text against a live schema.")

EXIT_DIAGNOSTICS = 1
EXIT_FAILURE = 2


@app.command()
def check(
    paths: List[str] = typer.Argument(..., help="Python files or directories to check."),
    database_url: Optional[str] = typer.Option(None, "--database-url", help="SQLAlchemy database URL."),
    config: Optional[str] = typer.Option(None, "--config", help="KEY=VALUE settings file."),
    command_type: Optional[str] = typer.Option(None, "--command-type", help="Command class name."),
    text_property: Optional[str] = typer.Option(None, "--text-property", help="Command SQL attribute."),
    marker: Optional[str] = typer.Option(None, "--marker", help="Named parameter marker."),
    parallelism: Optional[int] = typer.Option(None, "--parallelism", min=1),
    as_json: bool = typer.Option(False, "--json", help="Print one JSON object per diagnostic."),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
    log_dir: Optional[str] = typer.Option(None, "--log-dir", help="Write a run log here."),
    events_file: Optional[str] = typer.Option(None, "--events-file", help="Append JSONL log events here."),
) -> None:
    """Check SQL passed to command objects in ``paths``."""

    init_logger(Settings(verbose=verbose, log_dir=log_dir, events_file=events_file))
    try:
        settings = load_settings(
            database_url,
            config,
            command_type=command_type,
            text_property=text_property,
            parameter_marker=marker,
            parallelism=parallelism,
        )
    except ValueError as err:
        raise typer.BadParameter(str(err)) from err

    validator = SQLValidator(settings.database_url, pool_size=settings.pool_size)
    analyzer = CommandAnalyzer(
        validator,
        ConsoleSink(as_json=as_json),
        command_type=settings.command_type,
        text_property=settings.text_property,
        marker=settings.parameter_marker,
    )

    failed = False
    jobs = []
    for path in iter_python_files(paths):
        try:
            jobs.append(analyzer.prepare(SourceModel.from_file(path)))
        except (SyntaxError, UnicodeDecodeError, OSError) as err:
            log.error("Cannot parse %s: %s", path, err)
            failed = True

    pool = SitePool(analyzer, settings.parallelism, settings.pool_size)
    try:
        records = pool.run(jobs)
    except FatalValidationError as err:
        log.critical("%s", err)
        raise typer.Exit(EXIT_FAILURE) from err
    finally:
        validator.dispose()

    if failed:
        raise typer.Exit(EXIT_FAILURE)
    if records:
        raise typer.Exit(EXIT_DIAGNOSTICS)


@app.command("rules")
def rules_cmd() -> None:
    """List the diagnostic rules."""

    for rule in RULES.values():
        typer.echo(f"{rule.id}  {rule.severity:<8} {rule.title}")


if __name__ == "__main__":
    app()
