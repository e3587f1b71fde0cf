"""
Runtime settings for the foundation.

Settings come from an optional YAML file, then ``VIVARIUM_*`` environment
variables override individual values.
"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .configuration import BuildingConfiguration, FacilityConfiguration
from .errors import ConfigurationError

SETTINGS_FILE_ENV = "VIVARIUM_SETTINGS_FILE"

_ENV_NAMES = {
    "db_path": "VIVARIUM_DB_PATH",
    "environment": "VIVARIUM_ENVIRONMENT",
    "log_level": "VIVARIUM_LOG_LEVEL",
    "default_facility_preset": "VIVARIUM_FACILITY_PRESET",
    "default_building_preset": "VIVARIUM_BUILDING_PRESET",
    "json_logs": "VIVARIUM_JSON_LOGS",
}


@dataclass(frozen=True)
class Settings:
    """Runtime settings.

    Attributes
    ----------
    db_path:
        SQLite database file used by the repository (``:memory:`` allowed).
    environment:
        ``development``, ``staging`` or ``production``. Sample data is only
        seeded in development.
    log_level:
        Root log level name.
    default_facility_preset / default_building_preset:
        Preset applied to new configurations; must name a known preset.
    json_logs:
        Emit JSON lines instead of plain text.
    """

    db_path: str = "~/.vivarium/vivarium.db"
    environment: str = "development"
    log_level: str = "INFO"
    default_facility_preset: str = "default"
    default_building_preset: str = "default"
    json_logs: bool = True

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


def _coerce_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


def _read_file(path: Path) -> Dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            document = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read settings file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Malformed settings file {path}: {e}") from e
    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ConfigurationError(f"Settings file {path} must contain a mapping")
    return document


def _check_preset(name: str, configuration_class) -> None:
    if name not in configuration_class.preset_names():
        raise ConfigurationError(
            f"Unknown {configuration_class.options_key} preset '{name}'. "
            f"Valid presets: {configuration_class.preset_names()}"
        )


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    """
    Load settings from a YAML file and the environment.

    Args:
        path: Settings file; falls back to ``$VIVARIUM_SETTINGS_FILE``. With
            neither, only defaults and environment overrides apply.

    Raises:
        ConfigurationError: If the file is unreadable or malformed, or a
            preset name is unknown
    """
    settings = Settings()
    path = path or os.environ.get(SETTINGS_FILE_ENV)
    values: Dict[str, Any] = _read_file(Path(path).expanduser()) if path else {}

    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigurationError(f"Unknown settings: {unknown}")

    for name, env_name in _ENV_NAMES.items():
        if env_name in os.environ:
            values[name] = os.environ[env_name]

    if "json_logs" in values:
        values["json_logs"] = _coerce_bool(values["json_logs"], settings.json_logs)
    for name in known - {"json_logs"}:
        if name in values:
            values[name] = str(values[name])

    settings = replace(settings, **values)
    _check_preset(settings.default_facility_preset, FacilityConfiguration)
    _check_preset(settings.default_building_preset, BuildingConfiguration)
    return settings
