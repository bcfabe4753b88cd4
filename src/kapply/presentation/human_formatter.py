"""Human-friendly output formatter - converts plans, reports and drift to readable text."""

import os
from typing import List, Optional
from ..contracts.drift import DriftReport
from ..contracts.outcome import OutcomeStatus, ReconciliationReport
from ..contracts.plan import ApplyPlan, PlanDirection


def _use_ascii(ascii_mode: Optional[bool] = None) -> bool:
    """Resolve whether to use ASCII output (checked at format time)."""
    if ascii_mode is not None:
        return bool(ascii_mode)
    return os.environ.get("KAPPLY_ASCII", "").lower() in ("1", "true", "yes")


def _box(title: str, width: int = 65, ascii_mode: bool = False) -> List[str]:
    """Return box-drawing header lines."""
    b = {"tl": "+", "tr": "+", "h": "-", "v": "|"} if ascii_mode else {"tl": "┌", "tr": "┐", "h": "─", "v": "│"}
    h = b["h"] * (width - 2)
    return [
        b["tl"] + h + b["tr"],
        f"{b['v']} {title:<{width - 4}} {b['v']}",
        ("+" if ascii_mode else "└") + h + ("+" if ascii_mode else "┘"),
        "",
    ]


def _section(title: str, width: int = 65) -> List[str]:
    """Return section divider."""
    h = "-" * width
    return [h, title.center(width), h]


def _status_marker(status: str, ascii_mode: bool) -> str:
    markers = {
        OutcomeStatus.APPLIED.value: ("[+]", "✅"),
        OutcomeStatus.UNCHANGED.value: ("[=]", "➖"),
        OutcomeStatus.FAILED.value: ("[x]", "❌"),
        OutcomeStatus.SKIPPED.value: ("[-]", "⏭️"),
    }
    plain, fancy = markers.get(status, ("[?]", "?"))
    return plain if ascii_mode else fancy


def format_plan(plan: ApplyPlan, ascii_mode: Optional[bool] = None) -> str:
    """Render the ordered plan."""
    ascii_mode = _use_ascii(ascii_mode)
    verb = "Apply" if plan.direction == PlanDirection.APPLY else "Destroy"
    lines = _box(f"kapply {verb} Plan ({len(plan)} resources)", ascii_mode=ascii_mode)

    if not plan.resources:
        lines.append("Nothing to do: no resources declared.")
        return "\n".join(lines)

    width = max(len(r.name) for r in plan.resources)
    for step in plan.to_summary():
        deps = step["depends_on"]
        after = f"  (after: {', '.join(deps)})" if deps else ""
        lines.append(f"{step['position']:>3}. {step['kind']:<9} {step['name']:<{width}}{after}")

    return "\n".join(lines)


def format_report(report: ReconciliationReport, ascii_mode: Optional[bool] = None) -> str:
    """Render a reconciliation report."""
    ascii_mode = _use_ascii(ascii_mode)
    verb = "Apply" if report.direction == PlanDirection.APPLY else "Destroy"
    lines = _box(f"kapply {verb} Report", ascii_mode=ascii_mode)

    for outcome in report.outcomes:
        marker = _status_marker(OutcomeStatus(outcome.status).value, ascii_mode)
        detail = outcome.describe()
        if outcome.action:
            detail += f" [{outcome.action.value}]"
        if outcome.changed_fields and outcome.action and outcome.action.value == "update":
            detail += f" fields: {', '.join(outcome.changed_fields)}"
        lines.append(f"{marker} {outcome.kind}/{outcome.name}: {detail}")

    lines.append("")
    lines.extend(_section("Summary"))
    counts = report.counts
    lines.append(
        "  ".join(f"{status.value}: {counts.get(status.value, 0)}" for status in OutcomeStatus)
    )
    if report.cancelled:
        lines.append("Run was cancelled; not-started resources were skipped.")
    if report.success:
        lines.append("All resources reconciled.")
    else:
        lines.append("Declared set is only partially applied." if report.direction == PlanDirection.APPLY
                     else "Teardown is incomplete.")
    return "\n".join(lines)


def format_drift(drift: DriftReport, ascii_mode: Optional[bool] = None) -> str:
    """Render a drift report; secret values arrive already masked."""
    ascii_mode = _use_ascii(ascii_mode)
    lines = _box("kapply Drift", ascii_mode=ascii_mode)

    for resource in drift.resources:
        if resource.in_sync:
            lines.append(f"  {resource.kind}/{resource.name}: in sync")
            continue
        symbol = "+" if resource.action.value == "create" else "~"
        lines.append(f"{symbol} {resource.kind}/{resource.name}: {resource.action.value}")
        for change in resource.changes:
            lines.append(f"    {change.field}: {change.observed!r} -> {change.desired!r}")

    counts = drift.counts()
    lines.append("")
    lines.append(f"create: {counts['create']}  update: {counts['update']}  in sync: {counts['in_sync']}")
    return "\n".join(lines)
