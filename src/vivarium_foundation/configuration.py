"""
Configuration model - versioned, self-validating settings per entity kind.

Each configuration is a flat record of toggles, thresholds and enums. The
field defaults on the dataclasses below are the canonical ``default`` preset.
Valid ranges and the other named presets come from data/configuration.yaml,
where ``minimal`` and ``secure`` are written as overrides of the default, so
adding a field only touches the dataclass and the option table.
"""

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, ClassVar, Dict, List, Optional

import yaml

from .errors import ConfigurationError
from .models import OperatingHours
from .validation import (
    EMAIL_PATTERN,
    PHONE_PATTERN,
    Rule,
    Validatable,
    ValidationError,
    each_pattern,
    numeric_range,
)

OPTIONS_PATH = Path(__file__).parent / "data" / "configuration.yaml"

NAMED_PATTERNS = {
    "email": EMAIL_PATTERN,
    "phone": PHONE_PATTERN,
}


class ConfigurationType(Enum):
    """Subsystems that carry a configuration."""
    FACILITY = "facility"
    USER = "user"
    EQUIPMENT = "equipment"
    ANIMAL = "animal"
    UI = "ui"
    DATABASE = "database"
    AUTHENTICATION = "authentication"
    REPORTING = "reporting"
    NOTIFICATION = "notification"
    SECURITY = "security"

    @property
    def description(self) -> str:
        if self is ConfigurationType.UI:
            return "UI Configuration"
        return f"{self.value.capitalize()} Configuration"


class ThemeType(Enum):
    STANDARD = "standard"
    DARK = "dark"
    LIGHT = "light"
    HIGH_CONTRAST = "highContrast"
    CUSTOM = "custom"

    @property
    def description(self) -> str:
        return "High Contrast" if self is ThemeType.HIGH_CONTRAST else self.value.capitalize()


class Language(Enum):
    ENGLISH = "en"
    SPANISH = "es"
    FRENCH = "fr"
    GERMAN = "de"
    CHINESE = "zh"
    JAPANESE = "ja"
    KOREAN = "ko"

    @property
    def native_name(self) -> str:
        return _LANGUAGE_NAMES[self]


_LANGUAGE_NAMES = {
    Language.ENGLISH: "English",
    Language.SPANISH: "Español",
    Language.FRENCH: "Français",
    Language.GERMAN: "Deutsch",
    Language.CHINESE: "中文",
    Language.JAPANESE: "日本語",
    Language.KOREAN: "한국어",
}


@dataclass(frozen=True)
class ValueRange:
    """Closed numeric interval [lower, upper]."""
    lower: float
    upper: float

    def __post_init__(self):
        if self.lower > self.upper:
            raise ValueError(f"Range lower bound {self.lower} exceeds upper bound {self.upper}")

    def __contains__(self, value: float) -> bool:
        return self.lower <= value <= self.upper

    def __str__(self) -> str:
        return f"{self.lower}...{self.upper}"

    def to_list(self) -> List[float]:
        return [self.lower, self.upper]


# Converters from plain (YAML / JSON) values to field values, by option type.
_DECODERS: Dict[str, Callable[[Any], Any]] = {
    "bool": bool,
    "int": int,
    "float": float,
    "list": list,
    "theme": ThemeType,
    "language": Language,
    "range": lambda v: v if isinstance(v, ValueRange) else ValueRange(float(v[0]), float(v[1])),
    "hours": lambda v: v if isinstance(v, OperatingHours) else OperatingHours.from_dict(v),
}

_ENCODERS: Dict[str, Callable[[Any], Any]] = {
    "list": list,
    "theme": lambda v: v.value,
    "language": lambda v: v.value,
    "range": lambda v: v.to_list(),
    "hours": lambda v: v.to_dict(),
}


@dataclass(frozen=True)
class OptionSpec:
    """One recognised configuration option."""
    name: str
    type: str
    default: Any = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    pattern: Optional[str] = None
    description: str = ""
    optional: bool = False  # None switches the option off

    def decode(self, value: Any) -> Any:
        if value is None:
            return None
        return _DECODERS[self.type](value)

    def encode(self, value: Any) -> Any:
        if value is None:
            return None
        return _ENCODERS.get(self.type, lambda v: v)(value)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "type": self.type,
            "default": self.encode(self.default),
            "min": self.minimum,
            "max": self.maximum,
            "pattern": self.pattern,
            "optional": self.optional,
            "description": self.description,
        }


@lru_cache(maxsize=None)
def load_option_document(path: Path = OPTIONS_PATH) -> Dict[str, Any]:
    """Load the option table / preset document."""
    if not path.exists():
        raise ConfigurationError(f"Configuration option table not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def _range_rule(spec: OptionSpec) -> Rule:
    def check(config):
        value = getattr(config, spec.name)
        if value is None:
            return None
        if value.lower < spec.minimum or value.upper > spec.maximum:
            return ValidationError.value_out_of_range(
                spec.name, str(value), f"{spec.minimum} to {spec.maximum}"
            )
        return None
    return Rule(f"range:{spec.name}", check)


def _rule_for(spec: OptionSpec) -> Optional[Rule]:
    if spec.type in ("int", "float") and spec.minimum is not None:
        return numeric_range(spec.name, lambda c: getattr(c, spec.name), spec.minimum, spec.maximum)
    if spec.type == "range":
        return _range_rule(spec)
    if spec.type == "list" and spec.pattern:
        return each_pattern(spec.name, lambda c: getattr(c, spec.name), spec.pattern)
    return None


class Configuration(Validatable):
    """
    Base for configuration records.

    Subclasses are dataclasses whose first field is ``is_default`` and set
    ``configuration_type`` and ``options_key`` (the section in the option
    table).
    """

    configuration_type: ClassVar[ConfigurationType]
    options_key: ClassVar[str]

    is_default: bool

    @property
    def version(self) -> str:
        return self.schema_version()

    @classmethod
    def schema_version(cls) -> str:
        return str(load_option_document()["version"])

    @classmethod
    def options(cls) -> List[OptionSpec]:
        """The option table for this configuration kind, defaults included."""
        defaults = cls()
        specs = []
        for raw in load_option_document()[cls.options_key]["options"]:
            regex = raw.get("pattern")
            specs.append(OptionSpec(
                name=raw["name"],
                type=raw["type"],
                default=getattr(defaults, raw["name"]),
                minimum=raw.get("min"),
                maximum=raw.get("max"),
                pattern=NAMED_PATTERNS.get(regex, regex),
                description=raw.get("description", ""),
                optional=bool(raw.get("optional", False)),
            ))
        return specs

    @classmethod
    def _spec_map(cls) -> Dict[str, OptionSpec]:
        return {spec.name: spec for spec in cls.options()}

    @classmethod
    def preset_names(cls) -> List[str]:
        return ["default"] + list(load_option_document()[cls.options_key].get("presets", {}))

    @classmethod
    def preset(cls, name: str) -> "Configuration":
        """
        Build a named preset.

        Raises:
            ConfigurationError: If the preset name is unknown
        """
        if name == "default":
            return cls(is_default=True)
        presets = load_option_document()[cls.options_key].get("presets", {})
        if name not in presets:
            raise ConfigurationError(
                f"Unknown {cls.options_key} preset '{name}'. "
                f"Valid presets: {cls.preset_names()}"
            )
        specs = cls._spec_map()
        overrides = {key: specs[key].decode(value) for key, value in presets[name].items()}
        return dataclasses.replace(cls(), **overrides)

    def rules(self) -> List[Rule]:
        rules = [rule for rule in map(_rule_for, self.options()) if rule is not None]
        return rules + self.extra_rules()

    def extra_rules(self) -> List[Rule]:
        return []

    def replace(self, **changes) -> "Configuration":
        """Copy with changes; a modified configuration is never the default."""
        changes.setdefault("is_default", False)
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict:
        d = {
            "configuration_type": self.configuration_type.value,
            "version": self.version,
            "is_default": self.is_default,
        }
        for spec in self.options():
            d[spec.name] = spec.encode(getattr(self, spec.name))
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Configuration":
        """
        Rebuild a configuration; missing options take their defaults.

        Raises:
            ConfigurationError: If the stored major version differs
        """
        version = str(d.get("version", cls.schema_version()))
        if version.split(".")[0] != cls.schema_version().split(".")[0]:
            raise ConfigurationError(f"Unsupported configuration version: {version}")
        values = {
            spec.name: spec.decode(d[spec.name])
            for spec in cls.options()
            if spec.name in d
        }
        return cls(is_default=bool(d.get("is_default", False)), **values)


@dataclass
class FacilityConfiguration(Configuration):
    """Operational, security, notification, retention and UI settings of a facility."""

    configuration_type: ClassVar[ConfigurationType] = ConfigurationType.FACILITY
    options_key: ClassVar[str] = "facility"

    is_default: bool = False

    requires_transfer_approval: bool = True
    requires_maintenance_approval: bool = True
    max_animals: Optional[int] = None
    max_users: Optional[int] = None
    supports_real_time_monitoring: bool = True
    supports_automated_reporting: bool = True

    requires_two_factor_auth: bool = False
    min_password_length: int = 8
    enforces_password_complexity: bool = True
    session_timeout_minutes: int = 480  # 8 hours
    logs_user_actions: bool = True

    sends_email_notifications: bool = True
    sends_push_notifications: bool = True
    sends_sms_notifications: bool = False
    default_notification_recipients: List[str] = field(default_factory=list)

    audit_log_retention_days: int = 2555  # 7 years
    animal_record_retention_days: int = 2555
    equipment_record_retention_days: int = 1825  # 5 years
    auto_archive_records: bool = True

    default_theme: ThemeType = ThemeType.STANDARD
    show_advanced_features: bool = False
    show_debug_info: bool = False
    default_language: Language = Language.ENGLISH


def _default_temperature() -> Optional[ValueRange]:
    return ValueRange(18.0, 24.0)


def _default_humidity() -> Optional[ValueRange]:
    return ValueRange(30.0, 70.0)


def _check_access_hours(config: "BuildingConfiguration") -> List[ValidationError]:
    if config.access_hours is None:
        if config.has_restricted_hours:
            return [ValidationError.required_field_missing("access_hours")]
        return []
    return [error.prefixed("access_hours") for error in config.access_hours.validate()]


@dataclass
class BuildingConfiguration(Configuration):
    """Access control, environment, safety and maintenance settings of a building."""

    # Buildings share the facility configuration kind; options_key tells them apart.
    configuration_type: ClassVar[ConfigurationType] = ConfigurationType.FACILITY
    options_key: ClassVar[str] = "building"

    is_default: bool = False

    requires_key_card_access: bool = True
    requires_visitor_registration: bool = True
    max_visitors: Optional[int] = None
    has_restricted_hours: bool = False
    access_hours: Optional[OperatingHours] = None

    has_environmental_monitoring: bool = True
    target_temperature_range: Optional[ValueRange] = field(default_factory=_default_temperature)
    target_humidity_range: Optional[ValueRange] = field(default_factory=_default_humidity)
    has_air_filtration: bool = True
    air_exchange_rate: Optional[float] = 10.0

    has_fire_suppression: bool = True
    has_emergency_lighting: bool = True
    has_emergency_exits: bool = True
    number_of_emergency_exits: Optional[int] = 2
    has_security_cameras: bool = True

    requires_regular_maintenance: bool = True
    maintenance_schedule_days: Optional[int] = 90
    has_automated_maintenance_alerts: bool = True

    def extra_rules(self) -> List[Rule]:
        return [Rule("access_hours", _check_access_hours)]


CONFIGURATION_CLASSES = {
    "facility": FacilityConfiguration,
    "building": BuildingConfiguration,
}


def describe_options(kind: str) -> List[dict]:
    """
    Describe every recognised option of a configuration kind.

    Args:
        kind: "facility" or "building"

    Returns:
        One dict per option: name, type, default, min, max, pattern, optional

    Raises:
        ConfigurationError: If the kind is unknown
    """
    if kind not in CONFIGURATION_CLASSES:
        raise ConfigurationError(
            f"Unknown configuration kind '{kind}'. Valid kinds: {list(CONFIGURATION_CLASSES)}"
        )
    return [spec.to_dict() for spec in CONFIGURATION_CLASSES[kind].options()]
