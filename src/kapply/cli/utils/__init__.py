"""CLI utilities package."""

import logging
import signal
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional
import click
from ...config import BackendType, ConcurrencySettings, KapplySettings, load_settings
from ...utils.errors import (
    DeclarationLoadError,
    DuplicateNameError,
    GraphConstructionError,
    KapplyError,
    MalformedSpecError,
)
from ...utils.logging import get_logger, set_level
from .file_resolver import resolve_declaration_path

logger = get_logger("cli.utils")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INVALID_INPUT = 2
EXIT_DRIFT = 3

INPUT_ERRORS = (DeclarationLoadError, MalformedSpecError, DuplicateNameError, GraphConstructionError)


def format_error(message: str, suggestion: Optional[str] = None) -> str:
    """
    Format error message with optional suggestion.

    Args:
        message: Error message
        suggestion: Optional suggestion or help text

    Returns:
        Formatted error string
    """
    error = f"Error: {message}"
    if suggestion:
        error += f"\nTip: {suggestion}"
    return error


def exit_code_for(error: KapplyError) -> int:
    """Malformed input, duplicates, bad references and cycles exit 2; the rest exit 1."""
    if isinstance(error, INPUT_ERRORS):
        return EXIT_INVALID_INPUT
    return EXIT_FAILED


def settings_from_options(
    config_path: Optional[str],
    state_file: Optional[str],
    workers: Optional[int]
) -> KapplySettings:
    """Load layered settings, then apply CLI overrides."""
    settings = load_settings(config_path)
    if state_file:
        settings.cluster = settings.cluster.model_copy(
            update={"backend": BackendType.STATE_FILE, "state_file": state_file}
        )
    if workers is not None:
        settings.concurrency = ConcurrencySettings(workers=workers)
    return settings


def write_output(text: str, output: Optional[str], quiet: bool) -> None:
    """Print text, or save it to a file when --output is given."""
    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(text)
        if not quiet:
            click.echo(f"Output saved to: {output_path}", err=True)
        return

    try:
        click.echo(text)
    except UnicodeEncodeError:
        click.echo(text.encode('ascii', errors='replace').decode('ascii'))


def configure_verbosity(quiet: bool, verbose: bool) -> None:
    if verbose:
        set_level(logging.DEBUG)
    elif quiet:
        set_level(logging.WARNING)


@contextmanager
def cancel_on_interrupt(quiet: bool = False) -> Iterator[threading.Event]:
    """
    Turn the first Ctrl-C into a cancellation request.

    In-flight calls finish; resources not yet started are skipped. A second
    Ctrl-C falls back to the previous handler.
    """
    event = threading.Event()
    if threading.current_thread() is not threading.main_thread():
        yield event
        return

    previous = signal.getsignal(signal.SIGINT)

    def _handler(signum, frame):
        if event.is_set():
            signal.signal(signal.SIGINT, previous)
            raise KeyboardInterrupt
        event.set()
        if not quiet:
            click.echo("Cancelling: waiting for in-flight calls to finish...", err=True)

    signal.signal(signal.SIGINT, _handler)
    try:
        yield event
    finally:
        signal.signal(signal.SIGINT, previous)


COMMON_OPTIONS = [
    click.option('--config', 'config_path', type=click.Path(), help='Path to a kapply config YAML file'),
    click.option('--json', 'json_output', is_flag=True, help='Output structured JSON instead of human-readable'),
    click.option('--output', '-o', type=click.Path(), help='Save output to file'),
    click.option('--quiet', is_flag=True, help='Suppress progress messages'),
    click.option('--verbose', '-v', is_flag=True, help='Enable debug logging'),
]

CLUSTER_OPTIONS = [
    click.option('--state-file', type=click.Path(), help='Use a local JSON state file instead of the cluster API'),
    click.option('--workers', type=click.IntRange(min=1), help='Parallel workers (capped at 8, default sequential)'),
]


def common_options(func):
    """Options shared by every command that reads declarations."""
    for option in reversed(COMMON_OPTIONS):
        func = option(func)
    return func


def cluster_options(func):
    """Options selecting the cluster backend and worker pool."""
    for option in reversed(CLUSTER_OPTIONS):
        func = option(func)
    return func


__all__ = [
    "resolve_declaration_path",
    "format_error",
    "exit_code_for",
    "settings_from_options",
    "write_output",
    "configure_verbosity",
    "cancel_on_interrupt",
    "common_options",
    "cluster_options",
    "EXIT_OK",
    "EXIT_FAILED",
    "EXIT_INVALID_INPUT",
    "EXIT_DRIFT",
]
