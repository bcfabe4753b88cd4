"""Pydantic model for the ordered apply/destroy plan."""

from enum import Enum
from typing import Dict, List
from pydantic import BaseModel, Field
from ..ingest.models import ResourceSpec


class PlanDirection(str, Enum):
    """Which way a plan walks the dependency graph."""
    APPLY = "apply"
    DESTROY = "destroy"


class ApplyPlan(BaseModel):
    """Ordered resources such that every resource follows everything that blocks it."""
    direction: PlanDirection = Field(PlanDirection.APPLY, description="apply or destroy")
    resources: List[ResourceSpec] = Field(default_factory=list, description="Resources in execution order")
    blockers: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Per resource, the resources that must succeed first (dependencies for apply, dependents for destroy)"
    )
    dependencies: Dict[str, List[str]] = Field(default_factory=dict, description="Direct dependencies per resource")

    @property
    def order(self) -> List[str]:
        return [resource.name for resource in self.resources]

    def __len__(self) -> int:
        return len(self.resources)

    def reversed(self) -> "ApplyPlan":
        """Teardown plan: exact reverse order, blockers become dependents."""
        dependents: Dict[str, List[str]] = {resource.name: [] for resource in self.resources}
        for name, deps in self.dependencies.items():
            for dep in deps:
                dependents[dep].append(name)

        return ApplyPlan(
            direction=PlanDirection.DESTROY if self.direction == PlanDirection.APPLY else PlanDirection.APPLY,
            resources=list(reversed(self.resources)),
            blockers=dependents if self.direction == PlanDirection.APPLY else dict(self.dependencies),
            dependencies=dict(self.dependencies),
        )

    def to_summary(self) -> List[Dict[str, object]]:
        """Plan steps as plain data (no secret values)."""
        return [
            {
                "position": position,
                "kind": resource.kind.value,
                "name": resource.name,
                "depends_on": list(self.dependencies.get(resource.name, [])),
            }
            for position, resource in enumerate(self.resources, start=1)
        ]
