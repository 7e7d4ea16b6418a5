"""Typed view over the scanner configuration."""
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping

from ..errors import InvalidScanConfig
from .defaults import DEFAULT_SETTINGS
from .manager import Config


@dataclass(frozen=True)
class ScanSettings:
    """Validated settings consumed by the scan engine."""

    probe_timeout: float = 1.0
    probe_backend: str = "ping"
    io_multiplier: int = 8
    max_host_workers: int = 64
    max_subnet_workers: int = 8
    progress_every: int = 50
    host_start: int = 1
    host_end: int = 254
    full_sweep_base: str = "192.168"

    def __post_init__(self) -> None:
        if self.probe_timeout <= 0:
            raise InvalidScanConfig(
                f"probe_timeout must be positive, got {self.probe_timeout!r}"
            )
        for name in ("io_multiplier", "max_host_workers", "max_subnet_workers"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 1:
                raise InvalidScanConfig(f"{name} must be an integer >= 1, got {value!r}")
        if not isinstance(self.progress_every, int) or self.progress_every < 0:
            raise InvalidScanConfig(
                f"progress_every must be an integer >= 0, got {self.progress_every!r}"
            )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ScanSettings":
        """Build settings from *data*, ignoring unknown keys."""

        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        try:
            return cls(**values)
        except TypeError as exc:
            raise InvalidScanConfig(str(exc)) from exc

    @classmethod
    def from_config(cls, config: Config | None = None) -> "ScanSettings":
        """Return settings from *config*, or from the built-in defaults."""

        data = config.config if config is not None else DEFAULT_SETTINGS
        return cls.from_mapping(data)

    def with_overrides(self, **overrides: Any) -> "ScanSettings":
        """Return a copy with every non-``None`` override applied."""

        changes = {key: value for key, value in overrides.items() if value is not None}
        if not changes:
            return self
        return replace(self, **changes)


__all__ = ["ScanSettings"]
