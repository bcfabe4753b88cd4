"""Translate raw declaration records into validated ResourceSpec values."""

from typing import Dict, Any, List, Optional
from pydantic import ValidationError
from .models import DeclarationSet, Reference, ResourceKind, ResourceSpec, ServiceExposure
from ..utils.errors import DuplicateNameError, MalformedSpecError
from ..utils.logging import get_logger

logger = get_logger("ingest.declaration_parser")

SCALAR_TYPES = (str, int, float, bool)


def parse_declarations(records: List[Dict[str, Any]], sources: Optional[List[str]] = None) -> DeclarationSet:
    """
    Parse raw records into a DeclarationSet.

    Args:
        records: Raw declaration mappings in declaration order
        sources: Files the records came from (informational)

    Returns:
        DeclarationSet with one ResourceSpec per record

    Raises:
        MalformedSpecError: If a record is missing kind/name or has invalid data
        DuplicateNameError: If two records share a name
    """
    resources: List[ResourceSpec] = []
    seen: Dict[str, ResourceSpec] = {}

    for index, record in enumerate(records):
        resource = parse_resource(record, index)
        if resource.name in seen:
            raise DuplicateNameError(resource.name, seen[resource.name].kind.value, resource.kind.value)
        seen[resource.name] = resource
        resources.append(resource)

    logger.info(f"Parsed {len(resources)} resource declarations")
    return DeclarationSet(resources=resources, sources=sources or [])


def parse_resource(record: Dict[str, Any], index: int = 0) -> ResourceSpec:
    """Parse and validate a single declaration record."""
    if not isinstance(record, dict):
        raise MalformedSpecError(f"Declaration #{index} must be a mapping")

    label = record.get("name") or f"#{index}"

    for field_name in ("kind", "name"):
        value = record.get(field_name)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise MalformedSpecError(f"Declaration {label} is missing required field '{field_name}'")

    if not isinstance(record["name"], str):
        raise MalformedSpecError(f"Declaration #{index}: 'name' must be a string")

    kind = _parse_kind(record["kind"], label)

    data = record.get("data") or {}
    if not isinstance(data, dict):
        raise MalformedSpecError(f"Declaration {label}: 'data' must be a mapping")

    raw_references = record.get("references") or []
    if not isinstance(raw_references, list):
        raise MalformedSpecError(f"Declaration {label}: 'references' must be a list")

    try:
        references = [_parse_reference(raw, label) for raw in raw_references]
        if kind == ResourceKind.WORKLOAD:
            data = _validate_workload(data, label)
            references = _merge_references(references, _env_references(data.get("env", {})))
        elif kind == ResourceKind.SERVICE:
            data = _validate_service(data, label)
        else:
            _validate_key_values(data, label)

        return ResourceSpec(
            kind=kind,
            name=record["name"].strip(),
            data=data,
            references=references,
            index=index,
        )
    except ValidationError as e:
        raise MalformedSpecError(f"Declaration {label} is invalid: {e}")


def _parse_kind(raw_kind: Any, label: str) -> ResourceKind:
    """Match kind case-insensitively against the known kinds."""
    if isinstance(raw_kind, str):
        for kind in ResourceKind:
            if kind.value.lower() == raw_kind.strip().lower():
                return kind
    allowed = ", ".join(k.value for k in ResourceKind)
    raise MalformedSpecError(f"Declaration {label} has unknown kind '{raw_kind}' (expected one of: {allowed})")


def _parse_reference(raw: Any, label: str) -> Reference:
    if isinstance(raw, str):
        target, _, key = raw.partition(".")
        return Reference(target=target, key=key or None)
    if isinstance(raw, dict):
        if not raw.get("target"):
            raise MalformedSpecError(f"Declaration {label}: reference is missing 'target'")
        return Reference(target=raw["target"], key=raw.get("key"))
    raise MalformedSpecError(f"Declaration {label}: reference must be a mapping or 'target.key' string")


def _validate_key_values(data: Dict[str, Any], label: str) -> None:
    """Secret and Config data are flat key-value mappings."""
    for key, value in data.items():
        if not isinstance(value, SCALAR_TYPES):
            raise MalformedSpecError(
                f"Declaration {label}: value for key '{key}' must be a scalar, got {type(value).__name__}"
            )


def _validate_workload(data: Dict[str, Any], label: str) -> Dict[str, Any]:
    image = data.get("image")
    if not isinstance(image, str) or not image.strip():
        raise MalformedSpecError(f"Workload {label}: 'image' must be a non-empty string")

    replicas = data.get("replicas", 1)
    if isinstance(replicas, bool) or not isinstance(replicas, int) or replicas < 0:
        raise MalformedSpecError(f"Workload {label}: 'replicas' must be an integer >= 0")

    env = data.get("env") or {}
    if not isinstance(env, dict):
        raise MalformedSpecError(f"Workload {label}: 'env' must be a mapping")

    for var, binding in env.items():
        if isinstance(binding, dict):
            if not binding.get("from") or not binding.get("key"):
                raise MalformedSpecError(
                    f"Workload {label}: env '{var}' reference needs both 'from' and 'key'"
                )
        elif binding is not None and not isinstance(binding, SCALAR_TYPES):
            raise MalformedSpecError(f"Workload {label}: env '{var}' must be a literal or a {{from, key}} reference")

    normalized = dict(data)
    normalized["replicas"] = replicas
    normalized["env"] = env
    return normalized


def _validate_service(data: Dict[str, Any], label: str) -> Dict[str, Any]:
    raw_exposure = data.get("exposure", ServiceExposure.INTERNAL.value)
    try:
        exposure = ServiceExposure(str(raw_exposure).lower())
    except ValueError:
        raise MalformedSpecError(f"Service {label}: 'exposure' must be 'internal' or 'external'")

    for port_field in ("port", "external_port"):
        port = data.get(port_field)
        if port is None:
            continue
        if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 65535:
            raise MalformedSpecError(f"Service {label}: '{port_field}' must be an integer in 1..65535")

    if exposure == ServiceExposure.EXTERNAL and data.get("external_port") is None:
        raise MalformedSpecError(f"Service {label}: external exposure requires 'external_port'")

    normalized = dict(data)
    normalized["exposure"] = exposure.value
    return normalized


def _env_references(env: Dict[str, Any]) -> List[Reference]:
    """Extract references from {from, key} env bindings."""
    return [
        Reference(target=binding["from"], key=binding["key"])
        for binding in env.values()
        if isinstance(binding, dict)
    ]


def _merge_references(explicit: List[Reference], extracted: List[Reference]) -> List[Reference]:
    """Union keeping first-occurrence order."""
    merged: List[Reference] = []
    for ref in explicit + extracted:
        if ref not in merged:
            merged.append(ref)
    return merged
