"""Main CLI entry point for kapply."""

import click
from .commands.apply import apply
from .commands.plan import plan
from .commands.destroy import destroy
from .commands.diff import diff
from .commands.version import version as version_command
from .. import __version__


@click.group()
@click.version_option(version=__version__, prog_name="kapply", message="%(prog)s version %(version)s")
def cli():
    """kapply - Dependency-ordered declarative apply."""
    pass


cli.add_command(plan)
cli.add_command(apply)
cli.add_command(diff)
cli.add_command(destroy)
cli.add_command(version_command)
