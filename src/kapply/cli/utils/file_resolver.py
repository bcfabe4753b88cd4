"""File path resolution utilities for CLI."""

from pathlib import Path


def resolve_declaration_path(file_path: str) -> Path:
    """
    Resolve a declaration file or directory against the current directory.

    Args:
        file_path: User-provided file or directory path

    Returns:
        Resolved Path object

    Raises:
        FileNotFoundError: If the path does not exist
    """
    path = Path(file_path)

    if not path.is_absolute():
        path = Path.cwd() / path
    resolved_path = path.resolve()

    if not resolved_path.exists():
        raise FileNotFoundError(
            f"Declaration path not found: {file_path}. Please check the path and try again."
        )

    if not (resolved_path.is_file() or resolved_path.is_dir()):
        raise FileNotFoundError(
            f"Path is neither a file nor a directory: {file_path}. Please provide a declaration file or directory."
        )

    return resolved_path
