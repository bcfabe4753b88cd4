"""Diff command - report drift between declarations and live state."""

import json
import sys
import click
from ...presentation.human_formatter import format_drift
from ...utils.errors import KapplyError
from ...utils.logging import get_logger
from ..utils import (
    EXIT_DRIFT,
    EXIT_FAILED,
    EXIT_INVALID_INPUT,
    EXIT_OK,
    cluster_options,
    common_options,
    configure_verbosity,
    exit_code_for,
    format_error,
    resolve_declaration_path,
    settings_from_options,
    write_output,
)

logger = get_logger("cli.diff")


@click.command()
@click.argument('declarations', type=click.Path(exists=False))
@common_options
@cluster_options
def diff(declarations, config_path, json_output, output, quiet, verbose, state_file, workers):
    """
    Show drift without changing anything.

    Exit codes: 0 in sync, 3 drift found, 1 cluster error, 2 invalid declarations.
    """
    from ... import diff as diff_core
    configure_verbosity(quiet, verbose)

    try:
        try:
            path = resolve_declaration_path(declarations)
        except FileNotFoundError as e:
            click.echo(format_error(str(e)), err=True)
            sys.exit(EXIT_INVALID_INPUT)

        settings = settings_from_options(config_path, state_file, workers)
        drift = diff_core(str(path), settings=settings)

        if json_output:
            text = json.dumps(
                {"has_drift": drift.has_drift, **drift.model_dump(mode="json")},
                indent=2
            )
        else:
            text = format_drift(drift)
        write_output(text, output, quiet)
        sys.exit(EXIT_DRIFT if drift.has_drift else EXIT_OK)

    except KapplyError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(exit_code_for(e))
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        click.echo(format_error(f"Diff failed: {e}"), err=True)
        sys.exit(EXIT_FAILED)
