"""Reconciliation: diff desired vs observed state and apply the minimal change."""

from .diff import diff_resource
from .reconciler import OutcomeLedger, Reconciler
from .retry import call_with_retry

__all__ = [
    "diff_resource",
    "OutcomeLedger",
    "Reconciler",
    "call_with_retry",
]
