"""Command line entry point for mysql-health-check."""

import logging
import sys
from typing import Optional

import typer
from typing_extensions import Annotated

from . import __version__
from .checks import run_all_checks
from .collector import mysql_session
from .models import HealthCheckError, overall_level
from .report import make_console, render_report
from .utils import (
    DEFAULT_CNF_PATH,
    CheckSettings,
    get_hostname,
    is_supported_platform,
    load_profile,
)

logger = logging.getLogger("mhc.cli")

EXIT_FATAL = 2

app = typer.Typer(
    help="Snapshot health checks for a running MySQL server.",
    context_settings={"help_option_names": ["-h", "--help"]},
    add_completion=False,
)


def setup_logging(verbose: bool = False) -> None:
    """Log to stderr so stdout carries only the report."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"mysql-health-check {__version__}")
        raise typer.Exit()


@app.command()
def main(
    cnf: Annotated[
        str,
        typer.Option("--cnf", envvar="MYSQL_HEALTH_CNF",
                     help="Path to .my.cnf credentials file (or YAML host inventory)"),
    ] = DEFAULT_CNF_PATH,
    host_id: Annotated[
        Optional[str],
        typer.Option("--host-id", help="Host id to use from a YAML inventory"),
    ] = None,
    sample_seconds: Annotated[
        float,
        typer.Option("--sample-seconds", envvar="MYSQL_HEALTH_SAMPLE_SECONDS", min=0,
                     help="CPU sample duration in seconds"),
    ] = 3,
    redo_min_minutes: Annotated[
        float,
        typer.Option("--redo-min-minutes", min=0,
                     help="Minimum redo log coverage (minutes) considered OK"),
    ] = 45,
    no_color: Annotated[
        bool, typer.Option("--no-color", help="Disable ANSI color output"),
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log progress to stderr"),
    ] = False,
    version: Annotated[
        bool, typer.Option("--version", callback=version_callback, is_eager=True,
                           help="Show version and exit"),
    ] = False,
) -> None:
    """
    Connect to MySQL, evaluate all health checks and print a report.

    Exit code: 0 = OK, 1 = WARN, 2 = CRIT or fatal error.
    """
    setup_logging(verbose)

    if not is_supported_platform():
        typer.echo("WARNING: This tool is designed for Debian 12. Detected a different OS.", err=True)
        typer.echo("         Results may be inaccurate. Continuing anyway...", err=True)
        typer.echo("", err=True)

    settings = CheckSettings(
        sample_seconds=sample_seconds,
        redo_log_min_minutes=redo_min_minutes,
    )

    try:
        profile = load_profile(cnf, host_id)
        with mysql_session(profile) as session:
            snapshot = session.load_snapshot(settings)
            categories = run_all_checks(snapshot, settings, session.query_scalar)
    except HealthCheckError as e:
        logger.debug("Health check aborted", exc_info=True)
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(EXIT_FATAL)

    console = make_console(no_color=no_color)
    render_report(categories, snapshot.version, get_hostname(), cnf, console)

    overall = overall_level(categories)
    raise typer.Exit(int(overall))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
