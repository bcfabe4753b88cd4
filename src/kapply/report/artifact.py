"""CI/CD artifact generation from a ReconciliationReport."""

import json
from datetime import datetime, timezone
from pathlib import Path
from ..contracts.outcome import ReconciliationReport
from ..utils.errors import KapplyError
from ..utils.logging import get_logger

logger = get_logger("report.artifact")


def generate_artifacts(report: ReconciliationReport, output_dir: Path) -> None:
    """
    Generate CI/CD artifacts from a ReconciliationReport.

    Creates the following files in output_dir:
    - report.json: Full report (exact copy)
    - summary.json: Counts and failing resources
    - metadata.json: Report metadata

    Args:
        report: Report from a reconciliation run
        output_dir: Directory to write artifacts to

    Raises:
        KapplyError: If file write fails
    """
    from .. import __version__

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise KapplyError(f"Failed to create output directory: {e}")

    summary = {
        "direction": report.direction.value,
        "success": report.success,
        "cancelled": report.cancelled,
        "counts": report.counts,
        "failed": [{"name": o.name, "reason": o.reason} for o in report.failed],
        "skipped": [
            {"name": o.name, "reason": o.skip_reason.value if o.skip_reason else None, "blocked_by": o.blocked_by}
            for o in report.skipped
        ],
    }

    metadata = {
        "kapply_version": __version__,
        "report_version": report.version,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "generator": "kapply report artifact",
    }

    for filename, payload in (
        ("report.json", report.model_dump(mode="json")),
        ("summary.json", summary),
        ("metadata.json", metadata),
    ):
        path = output_dir / filename
        try:
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(payload, f, indent=2, default=str)
            logger.debug(f"Written {filename}: {path}")
        except (OSError, TypeError) as e:
            raise KapplyError(f"Failed to write {filename}: {e}")

    logger.info(f"Generated artifacts in: {output_dir}")
