"""Persisted JSON configuration for the sweep CLI."""
from __future__ import annotations

import json
import logging
import shutil
from copy import deepcopy
from json import JSONDecodeError
from pathlib import Path
from typing import Any, Dict

from .defaults import DEFAULT_SETTINGS
from .paths import ConfigPaths

logger = logging.getLogger(__name__)


class Config:
    """Load, mutate, and persist scanner configuration."""

    def __init__(
        self,
        *,
        paths: ConfigPaths | None = None,
        defaults: Dict[str, Any] | None = None,
    ) -> None:
        self.paths = paths or ConfigPaths.create()
        self.defaults: Dict[str, Any] = deepcopy(defaults or DEFAULT_SETTINGS)
        self.config: Dict[str, Any] = self.defaults.copy()
        self.load_ok = self._load_config()

    @property
    def config_file(self) -> Path:
        """Return the primary configuration file path."""

        return self.paths.config_file

    def _load_config(self) -> bool:
        """Load configuration from disk, falling back to defaults."""

        path = self.paths.config_file
        if not path.exists():
            self.config = self.defaults.copy()
            return True
        try:
            with open(path, "r", encoding="utf-8") as handle:
                loaded = json.load(handle)
            if not isinstance(loaded, dict):
                raise JSONDecodeError("top-level value is not an object", "", 0)
            self.config = {**self.defaults, **loaded}
            return True
        except (JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("Invalid config file, resetting to defaults: %s", exc)
            backup = path.with_suffix(path.suffix + ".bak")
            try:
                shutil.move(path, backup)
            except OSError as backup_err:
                logger.warning("Failed to back up invalid config: %s", backup_err)
            self.config = self.defaults.copy()
            self.save()
            return False
        except OSError as exc:
            logger.error("Error reading config: %s", exc)
            self.config = self.defaults.copy()
            return False

    def save(self) -> bool:
        """Persist the current configuration to disk."""

        try:
            self.paths.ensure()
            with open(self.paths.config_file, "w", encoding="utf-8") as handle:
                json.dump(self.config, handle, indent=4)
            return True
        except OSError as exc:
            logger.error("Error saving config: %s", exc)
            return False

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for *key* or ``default`` when unset."""

        return self.config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Assign *value* to *key* within the configuration."""

        self.config[key] = value

    def reset_to_defaults(self) -> None:
        """Replace the configuration with the default values."""

        self.config = self.defaults.copy()
        self.save()


__all__ = ["Config"]
