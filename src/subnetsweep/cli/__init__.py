"""Command line helpers and entry points for subnetsweep."""
from __future__ import annotations

from .app import main, parse_args, run_cli

__all__ = ["main", "parse_args", "run_cli"]
