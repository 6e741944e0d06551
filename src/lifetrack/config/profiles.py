"""Configuration profile selection.

The profile is chosen by LIFETRACK_PROFILE and falls back to dev.
"""

import os
from enum import Enum
from pathlib import Path

from .loader import DEFAULT_CONFIG_DIR

PROFILE_ENV_VAR = "LIFETRACK_PROFILE"


class Profile(Enum):
    """Available configuration profiles."""

    DEV = "dev"
    PROD = "prod"
    TEST = "test"


def detect_profile() -> Profile:
    """Profile named by LIFETRACK_PROFILE, case-insensitive.

    Unset or unrecognized values select DEV.
    """
    value = os.environ.get(PROFILE_ENV_VAR, "").strip().lower()
    try:
        return Profile(value)
    except ValueError:
        return Profile.DEV


def get_profile_path(profile: Profile | None = None, config_dir: Path | None = None) -> Path:
    """Path of a profile's YAML file (the detected profile if none given)."""
    profile = profile or detect_profile()
    return (config_dir or DEFAULT_CONFIG_DIR) / f"{profile.value}.yaml"


def is_development() -> bool:
    return detect_profile() == Profile.DEV


def is_production() -> bool:
    return detect_profile() == Profile.PROD


__all__ = [
    "PROFILE_ENV_VAR",
    "Profile",
    "detect_profile",
    "get_profile_path",
    "is_development",
    "is_production",
]
