"""Aggregate per-resource outcomes into a reconciliation report."""

from typing import List
from ..contracts.outcome import OutcomeStatus, ReconciliationOutcome, ReconciliationReport
from ..contracts.plan import ApplyPlan
from ..utils.logging import get_logger

logger = get_logger("report.summary")


def count_outcomes(outcomes: List[ReconciliationOutcome]) -> dict:
    """Number of outcomes per status; every status is present."""
    counts = {status.value: 0 for status in OutcomeStatus}
    for outcome in outcomes:
        counts[OutcomeStatus(outcome.status).value] += 1
    return counts


def build_report(
    plan: ApplyPlan,
    outcomes: List[ReconciliationOutcome],
    cancelled: bool = False,
    duration_seconds: float = 0.0
) -> ReconciliationReport:
    """
    Build the structured report for one run.

    Args:
        plan: Plan the run executed
        outcomes: Recorded outcomes, in plan order
        cancelled: Whether the run was cancelled
        duration_seconds: Wall time of the run

    Returns:
        ReconciliationReport (structured data only, no formatting)
    """
    missing = [name for name in plan.order if name not in {o.name for o in outcomes}]
    if missing:
        logger.warning(f"No outcome recorded for: {', '.join(missing)}")

    return ReconciliationReport(
        direction=plan.direction,
        counts=count_outcomes(outcomes),
        outcomes=list(outcomes),
        order=plan.order,
        cancelled=cancelled,
        duration_seconds=round(max(duration_seconds, 0.0), 3),
    )
