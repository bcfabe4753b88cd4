"""Pydantic models for per-resource outcomes and the run report (versioned, stable, explicit)."""

from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from .plan import PlanDirection


class OutcomeStatus(str, Enum):
    """Terminal state of one resource in a run."""
    APPLIED = "Applied"
    UNCHANGED = "Unchanged"
    FAILED = "Failed"
    SKIPPED = "Skipped"


class SkipReason(str, Enum):
    """Why a resource was not attempted."""
    BLOCKING_DEPENDENCY = "blocking-dependency"
    CANCELLED = "cancelled"


class ChangeAction(str, Enum):
    """Mutating call issued for a resource."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class ReconciliationOutcome(BaseModel):
    """Outcome of one resource; immutable once recorded."""
    name: str = Field(..., description="Resource name")
    kind: str = Field(..., description="Resource kind")
    status: OutcomeStatus = Field(..., description="Applied, Unchanged, Failed or Skipped")
    action: Optional[ChangeAction] = Field(None, description="Mutating call issued, if any")
    changed_fields: List[str] = Field(default_factory=list, description="Managed fields that differed")
    reason: Optional[str] = Field(None, description="Failure reason")
    skip_reason: Optional[SkipReason] = Field(None, description="Why the resource was skipped")
    blocked_by: Optional[str] = Field(None, description="Resource whose failure blocked this one")
    attempts: int = Field(0, ge=0, description="Cluster API attempts for the mutating step")

    class Config:
        frozen = True

    @property
    def succeeded(self) -> bool:
        return self.status in (OutcomeStatus.APPLIED, OutcomeStatus.UNCHANGED)

    def describe(self) -> str:
        if self.status == OutcomeStatus.FAILED:
            return f"Failed({self.reason})"
        if self.status == OutcomeStatus.SKIPPED:
            detail = self.skip_reason.value if self.skip_reason else "skipped"
            if self.blocked_by:
                detail = f"{detail}: {self.blocked_by}"
            return f"Skipped({detail})"
        return self.status.value


class ReconciliationReport(BaseModel):
    """Aggregated result of one reconciliation run."""
    version: str = Field(default="1.0.0", description="Report contract version")
    direction: PlanDirection = Field(PlanDirection.APPLY, description="apply or destroy")
    counts: Dict[str, int] = Field(default_factory=dict, description="Number of outcomes per status")
    outcomes: List[ReconciliationOutcome] = Field(default_factory=list, description="Outcomes in plan order")
    order: List[str] = Field(default_factory=list, description="Plan order of the run")
    cancelled: bool = Field(False, description="Whether the run was cancelled")
    duration_seconds: float = Field(0.0, ge=0)

    @property
    def failed(self) -> List[ReconciliationOutcome]:
        return [o for o in self.outcomes if o.status == OutcomeStatus.FAILED]

    @property
    def skipped(self) -> List[ReconciliationOutcome]:
        return [o for o in self.outcomes if o.status == OutcomeStatus.SKIPPED]

    @property
    def success(self) -> bool:
        """True when every resource ended Applied or Unchanged."""
        return all(o.succeeded for o in self.outcomes)

    def outcome_for(self, name: str) -> Optional[ReconciliationOutcome]:
        for outcome in self.outcomes:
            if outcome.name == name:
                return outcome
        return None
