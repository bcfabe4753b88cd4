"""Load raw declaration records from YAML/JSON files or directories."""

import json
from pathlib import Path
from typing import Any, Dict, List, Tuple
import yaml
from ..utils.errors import DeclarationLoadError
from ..utils.logging import get_logger

logger = get_logger("ingest.declaration_loader")

DECLARATION_SUFFIXES = (".yaml", ".yml", ".json")


def load_declarations(path: str) -> Tuple[List[Dict[str, Any]], List[str]]:
    """
    Load raw declaration records from a file or a directory of files.

    Args:
        path: Declaration file, or directory holding *.yaml/*.yml/*.json files

    Returns:
        Tuple of (records in declaration order, source file paths)

    Raises:
        DeclarationLoadError: If a file cannot be read or has the wrong shape
    """
    source = Path(path)

    if not source.exists():
        raise DeclarationLoadError(
            f"Declaration path not found: {path}. "
            "Please check the path and ensure it exists."
        )

    if source.is_dir():
        files = sorted(
            p for p in source.iterdir()
            if p.is_file() and p.suffix.lower() in DECLARATION_SUFFIXES
        )
        if not files:
            raise DeclarationLoadError(f"No declaration files (*.yaml, *.yml, *.json) found in {path}")
    else:
        files = [source]

    records: List[Dict[str, Any]] = []
    for file_path in files:
        file_records = _load_file(file_path)
        logger.debug(f"Loaded {len(file_records)} declarations from {file_path}")
        records.extend(file_records)

    logger.info(f"Loaded {len(records)} declarations from {len(files)} file(s)")
    return records, [str(f) for f in files]


def _load_file(file_path: Path) -> List[Dict[str, Any]]:
    """Read one file and return its records."""
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            text = f.read()
    except OSError as e:
        raise DeclarationLoadError(
            f"Error reading declaration file {file_path}: {e}. "
            "Please check file permissions and try again."
        )

    try:
        if file_path.suffix.lower() == ".json":
            documents = [json.loads(text)]
        else:
            documents = [doc for doc in yaml.safe_load_all(text) if doc is not None]
    except json.JSONDecodeError as e:
        raise DeclarationLoadError(f"Invalid JSON in declaration file {file_path}: {e}")
    except yaml.YAMLError as e:
        raise DeclarationLoadError(f"Invalid YAML in declaration file {file_path}: {e}")

    records: List[Dict[str, Any]] = []
    for document in documents:
        records.extend(_records_from_document(document, file_path))
    return records


def _records_from_document(document: Any, file_path: Path) -> List[Dict[str, Any]]:
    """Accept a list of records, a {resources: [...]} mapping, or a single record."""
    if isinstance(document, list):
        items = document
    elif isinstance(document, dict) and "resources" in document:
        items = document["resources"]
        if not isinstance(items, list):
            raise DeclarationLoadError(f"'resources' must be a list in {file_path}")
    elif isinstance(document, dict):
        items = [document]
    else:
        raise DeclarationLoadError(
            f"Declaration file {file_path} must contain a list of resources, "
            "a mapping with a 'resources' key, or a single resource mapping"
        )

    for position, item in enumerate(items):
        if not isinstance(item, dict):
            raise DeclarationLoadError(
                f"Declaration #{position} in {file_path} must be a mapping, got {type(item).__name__}"
            )
    return items
