from .plan import ApplyPlan, PlanDirection
from .outcome import ChangeAction, OutcomeStatus, ReconciliationOutcome, ReconciliationReport, SkipReason
from .drift import DriftReport, FieldChange, ResourceDrift

__all__ = [
    "ApplyPlan",
    "PlanDirection",
    "ChangeAction",
    "OutcomeStatus",
    "ReconciliationOutcome",
    "ReconciliationReport",
    "SkipReason",
    "DriftReport",
    "FieldChange",
    "ResourceDrift",
]
