"""Library configuration for pytikz."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from pytikz._constants import DEFAULT_MIRROR_URL, DEFAULT_NOTICE_DURATION
from pytikz.exceptions import PytikzConfigError


def _default_data_dir() -> Path:
    base = os.environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return Path(base) / "pytikz"


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(env_key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise PytikzConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class PytikzConfig:
    """Library configuration.

    Parameters
    ----------
    mirror_url : str
        Base URL serving ``<name>.tar.gz`` package archives.
    packages_dir : Path
        Directory holding one unpacked subdirectory per installed package.
    settings_path : Path
        JSON file the plugin settings are saved to.
    request_timeout : float
        Total timeout in seconds for one archive download.
    notice_duration : float
        Seconds a user-facing notice stays visible.
    invert_colors_in_dark_mode : bool
        Default for the dark-mode toggle when no settings file exists yet.
    """

    mirror_url: str = DEFAULT_MIRROR_URL
    packages_dir: Path = dataclasses.field(default_factory=lambda: _default_data_dir() / "packages")
    settings_path: Path = dataclasses.field(default_factory=lambda: _default_data_dir() / "settings.json")
    request_timeout: float = 60.0
    notice_duration: float = DEFAULT_NOTICE_DURATION
    invert_colors_in_dark_mode: bool = True

    def __post_init__(self) -> None:
        if self.request_timeout <= 0:
            raise PytikzConfigError("request_timeout must be positive")
        if self.notice_duration < 0:
            raise PytikzConfigError("notice_duration must not be negative")
        # Accept plain strings for paths.
        object.__setattr__(self, "packages_dir", Path(self.packages_dir))
        object.__setattr__(self, "settings_path", Path(self.settings_path))

    @classmethod
    def from_env(cls, **overrides: Any) -> PytikzConfig:
        """Create configuration from ``PYTIKZ_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "PYTIKZ_MIRROR_URL": "mirror_url",
            "PYTIKZ_PACKAGES_DIR": "packages_dir",
            "PYTIKZ_SETTINGS_PATH": "settings_path",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        for env_key, field_name in (
            ("PYTIKZ_REQUEST_TIMEOUT", "request_timeout"),
            ("PYTIKZ_NOTICE_DURATION", "notice_duration"),
        ):
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        if "invert_colors_in_dark_mode" not in overrides:
            config_kwargs["invert_colors_in_dark_mode"] = _env_bool(env.get("PYTIKZ_INVERT_COLORS"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
