"""Configuration module for LifeTrack.

This module provides configuration loading and profile management.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol


@dataclass
class TrackingConfig:
    """Location subscription and fix acceptance settings."""

    location_interval_ms: int = 5000
    fastest_location_interval_ms: int = 2000
    # None accepts every delivered fix
    max_accuracy_m: float | None = None


@dataclass
class MetricsConfig:
    """Derived metric settings."""

    kcal_per_km: float = 60.0


@dataclass
class StorageConfig:
    """MongoDB record storage configuration."""

    uri: str = "mongodb://localhost:27017"
    database: str = "lifetrack"
    user_id: str = "default"
    connect_timeout_ms: int = 5000
    server_selection_timeout_ms: int = 5000


@dataclass
class CoachConfig:
    """Text generation configuration."""

    enabled: bool = False
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 300
    temperature: float = 0.7
    timeout_seconds: float = 30.0


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"


@dataclass
class LifeTrackConfig:
    """Main LifeTrack configuration."""

    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    metrics: MetricsConfig = field(default_factory=MetricsConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    coach: CoachConfig = field(default_factory=CoachConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class ConfigLoader(Protocol):
    """Protocol for configuration loading."""

    def load(self, path: Path) -> LifeTrackConfig:
        """Load configuration from file path."""
        ...

    def load_profile(self, profile: str) -> LifeTrackConfig:
        """Load configuration by profile name (dev, prod, test)."""
        ...

    def get_config_dir(self) -> Path:
        """Get the configuration directory path."""
        ...


# Public API
__all__ = [
    "CoachConfig",
    "ConfigLoader",
    "LifeTrackConfig",
    "LoggingConfig",
    "MetricsConfig",
    "StorageConfig",
    "TrackingConfig",
]
