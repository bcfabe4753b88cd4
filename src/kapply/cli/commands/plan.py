"""Plan command - print the computed apply (or destroy) order."""

import json
import sys
import click
from ...presentation.human_formatter import format_plan
from ...utils.errors import KapplyError
from ...utils.logging import get_logger
from ..utils import (
    EXIT_FAILED,
    EXIT_INVALID_INPUT,
    common_options,
    configure_verbosity,
    exit_code_for,
    format_error,
    resolve_declaration_path,
    write_output,
)

logger = get_logger("cli.plan")


@click.command()
@click.argument('declarations', type=click.Path(exists=False))
@common_options
@click.option('--destroy', 'teardown', is_flag=True, help='Show the teardown order instead')
def plan(declarations, config_path, json_output, output, quiet, verbose, teardown):
    """Show the order resources would be applied in, without touching the cluster."""
    from ... import plan as plan_core
    configure_verbosity(quiet, verbose)

    try:
        try:
            path = resolve_declaration_path(declarations)
        except FileNotFoundError as e:
            click.echo(format_error(str(e)), err=True)
            sys.exit(EXIT_INVALID_INPUT)

        computed = plan_core(str(path), destroy=teardown)

        if json_output:
            text = json.dumps(
                {"direction": computed.direction.value, "steps": computed.to_summary()},
                indent=2
            )
        else:
            text = format_plan(computed)
        write_output(text, output, quiet)

    except KapplyError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(exit_code_for(e))
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        click.echo(format_error(f"Planning failed: {e}"), err=True)
        sys.exit(EXIT_FAILED)
