"""Configuration management for image derivation."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


def _env_list(name: str) -> frozenset[str]:
    value = os.getenv(name, "")
    return frozenset(v.strip().lower() for v in value.split(",") if v.strip())


@dataclass(frozen=True)
class OptimizerConfig:
    """
    Process-wide settings, loaded once by the hosting environment.

    recreate_all forces every derived file to be regenerated and the
    disable flags switch a format off for every call. Both win over
    per-call options.
    """

    web_root: Path = Path(".")
    recreate_all: bool = False
    disable_webp: bool = False
    disable_avif: bool = False
    disabled_formats: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def load(cls) -> OptimizerConfig:
        """Load configuration from environment variables."""
        return cls(
            web_root=Path(os.getenv("IMGOPT_WEB_ROOT", ".")),
            recreate_all=_env_flag("IMGOPT_RECREATE_ALL"),
            disable_webp=_env_flag("IMGOPT_DISABLE_WEBP"),
            disable_avif=_env_flag("IMGOPT_DISABLE_AVIF"),
            disabled_formats=_env_list("IMGOPT_DISABLE_FORMATS"),
        )

    def is_disabled(self, format_name: str) -> bool:
        """True if the format is switched off for the whole process."""
        name = format_name.lower()
        if name in self.disabled_formats:
            return True
        flags = {"webp": self.disable_webp, "avif": self.disable_avif}
        return flags.get(name, False)

    def resolved_root(self) -> Path:
        return Path(self.web_root).resolve()
