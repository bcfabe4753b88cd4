"""Presentation layer - human-friendly formatting."""

from .human_formatter import format_drift, format_plan, format_report

__all__ = ["format_drift", "format_plan", "format_report"]
