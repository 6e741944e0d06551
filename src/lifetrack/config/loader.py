"""Load LifeTrack settings from YAML profiles.

A profile file may name a parent with a top-level ``extends`` key; the
parent is loaded first and the child's sections are merged over it.
Connection settings can then be overridden from the environment.
"""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from . import (
    CoachConfig,
    LifeTrackConfig,
    LoggingConfig,
    MetricsConfig,
    StorageConfig,
    TrackingConfig,
)

DEFAULT_CONFIG_DIR = Path(__file__).parent.parent.parent.parent / "config"

# Environment variable -> (section, key)
ENV_OVERRIDES = {
    "LIFETRACK_MONGO_URI": ("storage", "uri"),
    "LIFETRACK_DATABASE": ("storage", "database"),
    "LIFETRACK_USER_ID": ("storage", "user_id"),
    "LIFETRACK_LOG_LEVEL": ("logging", "level"),
}


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into a copy of base, recursing into nested dicts."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_yaml_with_inheritance(path: Path, _seen: frozenset[Path] = frozenset()) -> dict[str, Any]:
    """Read a profile file and everything it extends.

    Raises:
        FileNotFoundError: If the file or one of its parents is missing
        ValueError: If the extends chain loops back on itself
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    resolved = path.resolve()
    if resolved in _seen:
        raise ValueError(f"Config inheritance loop at {path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    parent = data.pop("extends", None)
    if parent is None:
        return data

    inherited = load_yaml_with_inheritance(path.parent / parent, _seen | {resolved})
    return deep_merge(inherited, data)


def apply_env_overrides(
    data: dict[str, Any], environ: Mapping[str, str] | None = None
) -> dict[str, Any]:
    """Overlay the LIFETRACK_* variables that are set and non-empty."""
    env = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}
    for name, (section, key) in ENV_OVERRIDES.items():
        value = env.get(name, "").strip()
        if value:
            overrides.setdefault(section, {})[key] = value
    if not overrides:
        return data
    return deep_merge(data, {"lifetrack": overrides})


def dict_to_config(data: dict[str, Any]) -> LifeTrackConfig:
    """Build typed settings from the ``lifetrack`` root of a loaded file.

    Raises:
        TypeError: If a section holds a key the settings do not define
    """
    root = data.get("lifetrack") or {}

    def section(name: str) -> dict[str, Any]:
        # An empty YAML section loads as None
        return root.get(name) or {}

    return LifeTrackConfig(
        tracking=TrackingConfig(**section("tracking")),
        metrics=MetricsConfig(**section("metrics")),
        storage=StorageConfig(**section("storage")),
        coach=CoachConfig(**section("coach")),
        logging=LoggingConfig(**section("logging")),
    )


class YAMLConfigLoader:
    """Reads profiles from a config directory."""

    def __init__(self, config_dir: Path | None = None, use_env: bool = True) -> None:
        """Initialize loader.

        Args:
            config_dir: Directory holding <profile>.yaml files.
                        Defaults to the project's config/ directory.
            use_env: Apply LIFETRACK_* environment overrides after loading
        """
        self._config_dir = config_dir or DEFAULT_CONFIG_DIR
        self._use_env = use_env

    def load(self, path: Path) -> LifeTrackConfig:
        data = load_yaml_with_inheritance(path)
        if self._use_env:
            data = apply_env_overrides(data)
        return dict_to_config(data)

    def load_profile(self, profile: str) -> LifeTrackConfig:
        return self.load(self._config_dir / f"{profile}.yaml")

    def get_config_dir(self) -> Path:
        return self._config_dir


def load_config(path: str | Path | None = None, profile: str | None = None) -> LifeTrackConfig:
    """Load settings from an explicit file, a named profile, or dev.

    Examples:
        >>> config = load_config(profile="prod")
        >>> config = load_config(path="/etc/lifetrack/config.yaml")
    """
    loader = YAMLConfigLoader()
    if path is not None:
        return loader.load(Path(path))
    return loader.load_profile(profile or "dev")


__all__ = [
    "DEFAULT_CONFIG_DIR",
    "ENV_OVERRIDES",
    "YAMLConfigLoader",
    "apply_env_overrides",
    "deep_merge",
    "dict_to_config",
    "load_config",
    "load_yaml_with_inheritance",
]
