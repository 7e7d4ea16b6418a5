"""Configuration helpers and defaults for subnetsweep."""
from __future__ import annotations

from .defaults import DEFAULT_SETTINGS
from .manager import Config
from .paths import ConfigPaths
from .settings import ScanSettings

__all__ = ["Config", "ConfigPaths", "DEFAULT_SETTINGS", "ScanSettings"]
