"""Pydantic models for drift detection output."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from .outcome import ChangeAction


class FieldChange(BaseModel):
    """One managed field that differs between declared and observed state."""
    field: str
    desired: Any = None
    observed: Any = None


class ResourceDrift(BaseModel):
    """Difference between declared and observed state for one resource."""
    name: str
    kind: str
    action: Optional[ChangeAction] = Field(None, description="create when absent, update when drifted, None when in sync")
    changes: List[FieldChange] = Field(default_factory=list)

    @property
    def in_sync(self) -> bool:
        return self.action is None

    @property
    def changed_fields(self) -> List[str]:
        return [change.field for change in self.changes]


class DriftReport(BaseModel):
    """Drift across a whole declaration set, in plan order."""
    resources: List[ResourceDrift] = Field(default_factory=list)

    @property
    def has_drift(self) -> bool:
        return any(not r.in_sync for r in self.resources)

    def counts(self) -> Dict[str, int]:
        counts = {"create": 0, "update": 0, "in_sync": 0}
        for resource in self.resources:
            if resource.action is None:
                counts["in_sync"] += 1
            else:
                counts[resource.action.value] += 1
        return counts
