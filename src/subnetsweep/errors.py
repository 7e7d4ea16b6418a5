"""Exception types raised by subnetsweep."""
from __future__ import annotations


class SweepError(Exception):
    """Base class for errors raised by the scanner."""


class InvalidScanConfig(SweepError, ValueError):
    """Raised when scan input is rejected before any probing starts."""


__all__ = ["InvalidScanConfig", "SweepError"]
