"""Configuration loading from environment variables and kith.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_DEFAULT_DATA_DIR = Path.home() / ".kith" / "data"
_CONFIG_FILENAME = "kith.toml"
_TRUTHY = ("1", "true", "yes", "on")


@dataclass
class StoreConfig:
    """Snapshot store configuration."""

    keep_versions: int = 10
    autosave: bool = True


@dataclass
class KithConfig:
    """Top-level kith configuration."""

    store: StoreConfig = field(default_factory=StoreConfig)
    data_dir: Path = _DEFAULT_DATA_DIR
    log_level: str = "INFO"


def _as_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def load_config(config_path: Path | None = None) -> KithConfig:
    """Load configuration from environment variables and optional kith.toml.

    Priority: environment variables > kith.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.kith/
        for candidate in [Path.cwd() / _CONFIG_FILENAME, Path.home() / ".kith" / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    store_data = file_data.get("store", {})

    config = KithConfig(
        store=StoreConfig(
            keep_versions=int(
                os.getenv("KITH_KEEP_VERSIONS", store_data.get("keep_versions", 10))
            ),
            autosave=_as_bool(os.getenv("KITH_AUTOSAVE", store_data.get("autosave", True))),
        ),
        data_dir=Path(
            os.getenv("KITH_DATA_DIR", file_data.get("data_dir", str(_DEFAULT_DATA_DIR)))
        ).expanduser(),
        log_level=os.getenv("KITH_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
    return config
