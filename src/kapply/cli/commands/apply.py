"""Apply command - reconcile the cluster toward the declared set."""

import json
import sys
from pathlib import Path
import click
from ...contracts.outcome import ReconciliationReport
from ...presentation.human_formatter import format_report
from ...report.artifact import generate_artifacts
from ...utils.errors import KapplyError
from ...utils.logging import get_logger
from ..utils import (
    EXIT_FAILED,
    EXIT_INVALID_INPUT,
    EXIT_OK,
    cancel_on_interrupt,
    cluster_options,
    common_options,
    configure_verbosity,
    exit_code_for,
    format_error,
    resolve_declaration_path,
    settings_from_options,
    write_output,
)

logger = get_logger("cli.apply")


@click.command()
@click.argument('declarations', type=click.Path(exists=False))
@common_options
@cluster_options
@click.option('--artifacts', type=click.Path(file_okay=False), help='Write report.json/summary.json/metadata.json to this directory')
def apply(declarations, config_path, json_output, output, quiet, verbose, state_file, workers, artifacts):
    """
    Apply a declaration set (file or directory) to the cluster.

    Exit codes: 0 all resources Applied/Unchanged, 1 any resource Failed or
    Skipped, 2 malformed declarations or an invalid dependency graph.
    """
    from ... import apply as apply_core
    configure_verbosity(quiet, verbose)

    try:
        try:
            path = resolve_declaration_path(declarations)
        except FileNotFoundError as e:
            click.echo(format_error(str(e)), err=True)
            sys.exit(EXIT_INVALID_INPUT)

        settings = settings_from_options(config_path, state_file, workers)
        if not quiet:
            click.echo(f"Applying declarations: {path}", err=True)

        with cancel_on_interrupt(quiet) as cancel_event:
            report = apply_core(str(path), settings=settings, cancel_event=cancel_event)

        emit_report(report, json_output, output, quiet, artifacts)
        sys.exit(EXIT_OK if report.success else EXIT_FAILED)

    except KapplyError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(exit_code_for(e))
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        click.echo(format_error(f"Apply failed: {e}"), err=True)
        sys.exit(EXIT_FAILED)


def emit_report(report: ReconciliationReport, json_output: bool, output, quiet: bool, artifacts) -> None:
    """Print or save a run report; optionally write CI artifacts."""
    if json_output:
        text = json.dumps(report.model_dump(mode="json"), indent=2)
    else:
        text = format_report(report)
    write_output(text, output, quiet)

    if artifacts:
        generate_artifacts(report, Path(artifacts))
        if not quiet:
            click.echo(f"Artifacts written to: {artifacts}", err=True)
