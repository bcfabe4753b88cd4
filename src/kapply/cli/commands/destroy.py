"""Destroy command - tear down the declared set in reverse apply order."""

import sys
import click
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
)
from .apply import emit_report

logger = get_logger("cli.destroy")


@click.command()
@click.argument('declarations', type=click.Path(exists=False))
@common_options
@cluster_options
@click.option('--artifacts', type=click.Path(file_okay=False), help='Write report.json/summary.json/metadata.json to this directory')
@click.option('--yes', '-y', is_flag=True, help='Do not ask for confirmation')
def destroy(declarations, config_path, json_output, output, quiet, verbose, state_file, workers, artifacts, yes):
    """
    Delete every declared resource, dependents before dependencies.

    A resource is never deleted while a resource depending on it still exists:
    when a delete fails, everything it depends on is skipped.
    """
    from ... import destroy as destroy_core
    configure_verbosity(quiet, verbose)

    try:
        try:
            path = resolve_declaration_path(declarations)
        except FileNotFoundError as e:
            click.echo(format_error(str(e)), err=True)
            sys.exit(EXIT_INVALID_INPUT)

        if not yes:
            click.confirm(f"Delete every resource declared in {path}?", abort=True, err=True)

        settings = settings_from_options(config_path, state_file, workers)
        with cancel_on_interrupt(quiet) as cancel_event:
            report = destroy_core(str(path), settings=settings, cancel_event=cancel_event)

        emit_report(report, json_output, output, quiet, artifacts)
        sys.exit(EXIT_OK if report.success else EXIT_FAILED)

    except KapplyError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(exit_code_for(e))
    except click.Abort:
        raise
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        click.echo(format_error(f"Destroy failed: {e}"), err=True)
        sys.exit(EXIT_FAILED)
