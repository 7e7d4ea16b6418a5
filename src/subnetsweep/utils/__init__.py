"""Support helpers shared by the CLI and scanner."""
from __future__ import annotations

from .logging_config import setup_logging

__all__ = ["setup_logging"]
