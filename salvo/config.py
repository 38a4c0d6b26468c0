"""Runtime configuration read from environment variables."""
from __future__ import annotations

from dataclasses import dataclass, field
import os

from .engine_core.placement import parse_fleet


def env_flag(name: str, *, default: bool = False) -> bool:
    """Return a boolean flag from environment variables.

    Common truthy values (``1``, ``true``, ``yes``, ``on``) give ``True`` and
    common falsy ones (``0``, ``false``, ``no``, ``off``) give ``False``.  An
    unset or unrecognised value falls back to ``default``.
    """
    value = os.getenv(name)
    if value is None:
        return default

    normalised = value.strip().lower()
    if normalised in {"1", "true", "yes", "on"}:
        return True
    if normalised in {"0", "false", "no", "off"}:
        return False
    return default


@dataclass
class Settings:
    data_file: str = "game.json"
    persist: bool = True
    fleet: tuple[int, ...] = field(default_factory=lambda: parse_fleet(None))
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            data_file=os.getenv("SALVO_DATA_FILE", "game.json"),
            persist=env_flag("SALVO_PERSIST", default=True),
            fleet=parse_fleet(os.getenv("SALVO_FLEET") or None),
            allowed_origins=os.getenv("ALLOWED_ORIGINS", "*").split(","),
            host=os.getenv("SALVO_HOST", "0.0.0.0"),
            port=int(os.getenv("SALVO_PORT", "3000")),
            log_level=os.getenv("SALVO_LOG_LEVEL", "INFO").upper(),
        )


__all__ = ["Settings", "env_flag"]
