"""Console rendering for sweep progress and results."""
from __future__ import annotations

from .report import ConsoleReporter, build_summary_table

__all__ = ["ConsoleReporter", "build_summary_table"]
