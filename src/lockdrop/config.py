"""Runtime configuration for LockDrop.

Configuration is read once at startup into an immutable :class:`AppConfig`
which is then handed to the service and the web app explicitly.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

from lockdrop.core.exceptions import ConfigurationError


DEFAULT_PORT = 8080
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
DEFAULT_EXPIRY_HOURS = 24

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def _int_setting(env: Mapping[str, str], name: str, default: int, minimum: int = 0) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")
    return value


def _bool_setting(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def _port_setting(env: Mapping[str, str]) -> int:
    # An unusable PORT falls back to the default rather than aborting startup.
    try:
        port = int(env.get("PORT", DEFAULT_PORT))
    except ValueError:
        return DEFAULT_PORT
    if not 0 < port < 65536:
        return DEFAULT_PORT
    return port


@dataclass(frozen=True)
class AppConfig:
    """Immutable settings shared by the service and request handlers."""

    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    upload_dir: Path = Path("./uploads")
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    expiry_hours: int = DEFAULT_EXPIRY_HOURS
    kdf_workers: int = 4
    sweep_interval: int = 300
    enable_listing: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        env = os.environ if environ is None else environ
        return cls(
            host=env.get("LOCKDROP_HOST", "0.0.0.0"),
            port=_port_setting(env),
            upload_dir=Path(env.get("LOCKDROP_UPLOAD_DIR", "./uploads")).expanduser(),
            max_file_size=_int_setting(
                env, "LOCKDROP_MAX_FILE_SIZE", DEFAULT_MAX_FILE_SIZE, minimum=1
            ),
            expiry_hours=_int_setting(
                env, "LOCKDROP_EXPIRY_HOURS", DEFAULT_EXPIRY_HOURS, minimum=1
            ),
            kdf_workers=_int_setting(env, "LOCKDROP_KDF_WORKERS", 4, minimum=1),
            sweep_interval=_int_setting(env, "LOCKDROP_SWEEP_INTERVAL", 300),
            enable_listing=_bool_setting(env, "LOCKDROP_ENABLE_LISTING", True),
            log_level=env.get("LOCKDROP_LOG_LEVEL", "INFO").upper(),
        )

    def with_overrides(self, **overrides) -> "AppConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "upload_dir" in changes:
            changes["upload_dir"] = Path(changes["upload_dir"]).expanduser()
        return replace(self, **changes)
