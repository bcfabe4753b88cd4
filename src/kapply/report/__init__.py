"""Report module - structured results of reconciliation runs."""

from .summary import build_report, count_outcomes
from .artifact import generate_artifacts

__all__ = [
    "build_report",
    "count_outcomes",
    "generate_artifacts",
]
