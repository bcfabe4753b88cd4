"""Pydantic models for declared resources."""

from enum import Enum
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field

REDACTED = "***"


class ResourceKind(str, Enum):
    """Declared resource kinds."""
    SECRET = "Secret"
    CONFIG = "Config"
    WORKLOAD = "Workload"
    SERVICE = "Service"

    @property
    def plural(self) -> str:
        """REST collection name for this kind."""
        return f"{self.value.lower()}s"


class ServiceExposure(str, Enum):
    """How a Service is reachable."""
    INTERNAL = "internal"
    EXTERNAL = "external"


class Reference(BaseModel):
    """Typed (target, key) pair consumed from another resource."""
    target: str = Field(..., min_length=1, description="Name of the referenced resource")
    key: Optional[str] = Field(None, description="Key inside the target's data (optional for Workload/Service targets)")

    class Config:
        frozen = True

    def __str__(self) -> str:
        return f"{self.target}.{self.key}" if self.key else self.target


class ResourceSpec(BaseModel):
    """One declared unit of desired state."""
    kind: ResourceKind = Field(..., description="Resource kind")
    name: str = Field(..., min_length=1, description="Unique name within the declaration set")
    data: Dict[str, Any] = Field(default_factory=dict, description="Kind-specific payload")
    references: List[Reference] = Field(default_factory=list, description="References consumed from other resources")
    index: int = Field(0, ge=0, description="Position in declaration order")

    class Config:
        frozen = True

    @property
    def is_secret(self) -> bool:
        return self.kind == ResourceKind.SECRET

    def desired_body(self) -> Dict[str, Any]:
        """Payload sent to the cluster API on create/update."""
        return {
            "kind": self.kind.value,
            "name": self.name,
            "data": dict(self.data),
            "references": [ref.model_dump() for ref in self.references],
        }

    def redacted_data(self) -> Dict[str, Any]:
        """Data safe for logs and terminal output."""
        if self.is_secret:
            return {key: REDACTED for key in self.data}
        return dict(self.data)

    def __str__(self) -> str:
        return f"{self.kind.value}/{self.name}"


class ObservedState(BaseModel):
    """Live state of a resource as reported by the cluster API."""
    kind: ResourceKind
    name: str
    data: Dict[str, Any] = Field(default_factory=dict)
    references: List[Reference] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Orchestrator-owned fields")


class DeclarationSet(BaseModel):
    """Parsed declarations in declaration order."""
    resources: List[ResourceSpec] = Field(default_factory=list)
    sources: List[str] = Field(default_factory=list, description="Files the declarations were read from")

    def names(self) -> List[str]:
        return [resource.name for resource in self.resources]

    def get(self, name: str) -> Optional[ResourceSpec]:
        for resource in self.resources:
            if resource.name == name:
                return resource
        return None
