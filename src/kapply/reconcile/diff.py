"""Semantic diff between declared and observed state over managed fields."""

from typing import Any, Dict, List, Optional, Set
from ..contracts.drift import FieldChange, ResourceDrift
from ..contracts.outcome import ChangeAction
from ..ingest.models import REDACTED, ObservedState, ResourceKind, ResourceSpec

COMMON_IGNORED_FIELDS = {"uid", "resource_version", "status"}

# Fields the orchestrator writes back into live data; never drift.
IGNORED_FIELDS: Dict[ResourceKind, Set[str]] = {
    ResourceKind.SECRET: COMMON_IGNORED_FIELDS,
    ResourceKind.CONFIG: COMMON_IGNORED_FIELDS,
    ResourceKind.WORKLOAD: COMMON_IGNORED_FIELDS | {"pod_ips", "ready_replicas", "observed_generation"},
    ResourceKind.SERVICE: COMMON_IGNORED_FIELDS | {"cluster_ip", "endpoints"},
}

REFERENCES_FIELD = "references"


def diff_resource(desired: ResourceSpec, observed: Optional[ObservedState]) -> ResourceDrift:
    """
    Compare a declaration with live state.

    Returns:
        ResourceDrift with action create (absent), update (managed fields
        differ) or None (in sync). Secret values are masked in the changes.
    """
    if observed is None:
        return ResourceDrift(name=desired.name, kind=desired.kind.value, action=ChangeAction.CREATE)

    changes = _field_changes(desired, observed)
    return ResourceDrift(
        name=desired.name,
        kind=desired.kind.value,
        action=ChangeAction.UPDATE if changes else None,
        changes=changes,
    )


def _field_changes(desired: ResourceSpec, observed: ObservedState) -> List[FieldChange]:
    # Declared keys are always managed; the ignore set only filters undeclared live keys.
    ignored = IGNORED_FIELDS[desired.kind]
    keys = list(desired.data)
    keys += sorted(k for k in observed.data if k not in desired.data and k not in ignored)

    changes: List[FieldChange] = []
    for key in keys:
        want = desired.data.get(key)
        have = observed.data.get(key)
        if not _equal(want, have) or (key in desired.data) != (key in observed.data):
            changes.append(_change(desired, key, want, have))

    desired_refs = sorted(str(ref) for ref in desired.references)
    observed_refs = sorted(str(ref) for ref in observed.references)
    if desired_refs != observed_refs:
        changes.append(FieldChange(field=REFERENCES_FIELD, desired=desired_refs, observed=observed_refs))

    return changes


def _change(desired: ResourceSpec, key: str, want: Any, have: Any) -> FieldChange:
    if desired.is_secret:
        return FieldChange(
            field=key,
            desired=REDACTED if want is not None else None,
            observed=REDACTED if have is not None else None,
        )
    return FieldChange(field=key, desired=want, observed=have)


def _equal(want: Any, have: Any) -> bool:
    """Compare values, treating 1 and 1.0 alike but never True and 1."""
    if isinstance(want, bool) or isinstance(have, bool):
        return type(want) is type(have) and want == have
    if isinstance(want, dict) and isinstance(have, dict):
        return want.keys() == have.keys() and all(_equal(want[k], have[k]) for k in want)
    if isinstance(want, list) and isinstance(have, list):
        return len(want) == len(have) and all(_equal(a, b) for a, b in zip(want, have))
    return want == have
