"""Version command - show kapply version."""

import click
from ... import __version__


@click.command()
def version():
    """Show kapply version."""
    click.echo(f"kapply version {__version__}")
