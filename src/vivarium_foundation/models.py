"""
Value types composed into facilities and buildings.

ContactInfo, Address and OperatingHours are validated independently of the
aggregates that carry them. They are frozen; derive changed values with
``dataclasses.replace``. Times of day are ``datetime.time`` values and
serialize as ``"HH:MM"``.
"""

from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Dict, List, Optional

from .validation import (
    EMAIL_PATTERN,
    Rule,
    Validatable,
    ValidationError,
    pattern,
    required,
)

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def _parse_time(value) -> Optional[time]:
    if value is None:
        return None
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    return datetime.strptime(value, "%H:%M").time()


def _format_time(value: Optional[time]) -> Optional[str]:
    return value.strftime("%H:%M") if value is not None else None


@dataclass(frozen=True)
class ContactInfo(Validatable):
    """How to reach a facility."""
    email: str
    phone: Optional[str] = None
    fax: Optional[str] = None
    website: Optional[str] = None
    emergency_contact: Optional[str] = None

    def rules(self) -> List[Rule]:
        return [
            required("email", lambda c: c.email),
            pattern("email", lambda c: c.email, EMAIL_PATTERN),
        ]

    @property
    def formatted_contact_info(self) -> str:
        parts = [f"Email: {self.email}"]
        if self.phone is not None:
            parts.append(f"Phone: {self.phone}")
        if self.fax is not None:
            parts.append(f"Fax: {self.fax}")
        if self.website is not None:
            parts.append(f"Website: {self.website}")
        if self.emergency_contact is not None:
            parts.append(f"Emergency: {self.emergency_contact}")
        return "\n".join(parts)

    def to_dict(self) -> dict:
        return {
            "email": self.email,
            "phone": self.phone,
            "fax": self.fax,
            "website": self.website,
            "emergency_contact": self.emergency_contact,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "ContactInfo":
        return cls(
            email=d["email"],
            phone=d.get("phone"),
            fax=d.get("fax"),
            website=d.get("website"),
            emergency_contact=d.get("emergency_contact"),
        )


@dataclass(frozen=True)
class Address(Validatable):
    """Postal address."""
    street: str
    city: str
    state: str
    zip_code: str
    country: str
    building_number: Optional[str] = None
    suite: Optional[str] = None

    def rules(self) -> List[Rule]:
        return [
            required("street", lambda a: a.street),
            required("city", lambda a: a.city),
            required("state", lambda a: a.state),
            required("zip_code", lambda a: a.zip_code),
            required("country", lambda a: a.country),
        ]

    @property
    def formatted_address(self) -> str:
        parts = []
        if self.building_number is not None:
            parts.append(self.building_number)
        parts.append(self.street)
        if self.suite is not None:
            parts.append(f"Suite {self.suite}")
        parts.append(f"{self.city}, {self.state} {self.zip_code}")
        parts.append(self.country)
        return "\n".join(parts)

    def to_dict(self) -> dict:
        return {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "country": self.country,
            "building_number": self.building_number,
            "suite": self.suite,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Address":
        return cls(
            street=d["street"],
            city=d["city"],
            state=d["state"],
            zip_code=d["zip_code"],
            country=d["country"],
            building_number=d.get("building_number"),
            suite=d.get("suite"),
        )


def _check_day_hours(day: "DayHours") -> List[ValidationError]:
    if not day.is_open:
        return []
    errors = []
    if day.open_time is None:
        errors.append(ValidationError.required_field_missing("open_time"))
    if day.close_time is None:
        errors.append(ValidationError.required_field_missing("close_time"))
    if day.open_time is not None and day.close_time is not None:
        if day.open_time >= day.close_time:
            errors.append(ValidationError.business_rule_violation(
                "Open time must be before close time"
            ))
    return errors


@dataclass(frozen=True)
class DayHours(Validatable):
    """
    Opening hours for a single weekday.

    Closed days need no times. Open days need both times with open < close;
    hours that cross midnight are not representable. Times have minute
    precision: seconds and microseconds are dropped on construction.
    """
    is_open: bool
    open_time: Optional[time] = None
    close_time: Optional[time] = None

    def __post_init__(self):
        object.__setattr__(self, "open_time", _parse_time(self.open_time))
        object.__setattr__(self, "close_time", _parse_time(self.close_time))

    @classmethod
    def closed(cls) -> "DayHours":
        return cls(is_open=False)

    def rules(self) -> List[Rule]:
        return [Rule("day_hours", _check_day_hours)]

    def is_open_at(self, moment: time) -> bool:
        """Compare hour and minute only; both bounds are inclusive."""
        if not self.is_open or self.open_time is None or self.close_time is None:
            return False
        minutes = moment.hour * 60 + moment.minute
        opens = self.open_time.hour * 60 + self.open_time.minute
        closes = self.close_time.hour * 60 + self.close_time.minute
        return opens <= minutes <= closes

    def to_dict(self) -> dict:
        return {
            "is_open": self.is_open,
            "open_time": _format_time(self.open_time),
            "close_time": _format_time(self.close_time),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "DayHours":
        return cls(
            is_open=bool(d.get("is_open", False)),
            open_time=d.get("open_time"),
            close_time=d.get("close_time"),
        )


def _closed_day() -> DayHours:
    return DayHours(is_open=False)


@dataclass(frozen=True)
class OperatingHours(Validatable):
    """Weekly opening hours."""
    monday: DayHours = field(default_factory=_closed_day)
    tuesday: DayHours = field(default_factory=_closed_day)
    wednesday: DayHours = field(default_factory=_closed_day)
    thursday: DayHours = field(default_factory=_closed_day)
    friday: DayHours = field(default_factory=_closed_day)
    saturday: DayHours = field(default_factory=_closed_day)
    sunday: DayHours = field(default_factory=_closed_day)

    @classmethod
    def weekdays(cls, open_time: time, close_time: time) -> "OperatingHours":
        """Open Monday to Friday between the given times, closed at weekends."""
        days = {
            name: DayHours(is_open=True, open_time=open_time, close_time=close_time)
            for name in WEEKDAYS[:5]
        }
        return cls(**days)

    def rules(self) -> List[Rule]:
        # Field names stay bare ("open_time"), matching per-day validation.
        return [
            Rule(name, lambda hours, name=name: getattr(hours, name).validate())
            for name in WEEKDAYS
        ]

    def for_weekday(self, weekday: int) -> DayHours:
        """Hours for a weekday number as returned by ``datetime.weekday()`` (0 = Monday)."""
        return getattr(self, WEEKDAYS[weekday])

    def is_open_at(self, moment: datetime) -> bool:
        return self.for_weekday(moment.weekday()).is_open_at(moment.time())

    @property
    def is_currently_open(self) -> bool:
        """
        Whether the current local wall-clock time falls inside today's hours.

        Uses the process's local time; no time zone or DST handling.
        """
        return self.is_open_at(datetime.now())

    def to_dict(self) -> Dict[str, dict]:
        return {name: getattr(self, name).to_dict() for name in WEEKDAYS}

    @classmethod
    def from_dict(cls, d: dict) -> "OperatingHours":
        return cls(**{
            name: DayHours.from_dict(d[name]) if name in d else _closed_day()
            for name in WEEKDAYS
        })
