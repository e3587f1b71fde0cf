"""
Validation engine - field-level errors and composable rules.

Validation never stops at the first problem: every rule of an entity is
evaluated and the resulting errors are returned as one flat list. An empty
list means the value is valid.

Usage:
    class Address(Validatable):
        def rules(self):
            return [required("street", lambda a: a.street)]

    Address(street="  ").validate()
    # [ValidationError(kind=REQUIRED_FIELD_MISSING, field='street', ...)]
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, Union

from .errors import ValidationFailed

EMAIL_PATTERN = r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$"
PHONE_PATTERN = r"^[+]?[0-9\s\-\(\)]{10,}$"


class ValidationErrorKind(Enum):
    """Categories of field-level validation failures."""
    REQUIRED_FIELD_MISSING = "required_field_missing"
    INVALID_FORMAT = "invalid_format"
    VALUE_OUT_OF_RANGE = "value_out_of_range"
    DUPLICATE_VALUE = "duplicate_value"
    INVALID_RELATIONSHIP = "invalid_relationship"
    BUSINESS_RULE_VIOLATION = "business_rule_violation"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ValidationError:
    """
    A single validation failure.

    This is a value, not an exception. Entities return lists of these from
    validate(); ValidationFailed wraps a batch when a caller must abort.
    """
    kind: ValidationErrorKind
    field: Optional[str] = None
    value: Optional[str] = None
    expected: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def required_field_missing(cls, field: str) -> "ValidationError":
        return cls(ValidationErrorKind.REQUIRED_FIELD_MISSING, field=field)

    @classmethod
    def invalid_format(cls, field: str, expected: str) -> "ValidationError":
        return cls(ValidationErrorKind.INVALID_FORMAT, field=field, expected=expected)

    @classmethod
    def value_out_of_range(cls, field: str, value: str, valid_range: str) -> "ValidationError":
        return cls(
            ValidationErrorKind.VALUE_OUT_OF_RANGE,
            field=field,
            value=value,
            expected=valid_range,
        )

    @classmethod
    def duplicate_value(cls, field: str, value: str) -> "ValidationError":
        return cls(ValidationErrorKind.DUPLICATE_VALUE, field=field, value=value)

    @classmethod
    def invalid_relationship(cls, field: str, reason: str) -> "ValidationError":
        return cls(ValidationErrorKind.INVALID_RELATIONSHIP, field=field, message=reason)

    @classmethod
    def business_rule_violation(cls, rule: str) -> "ValidationError":
        return cls(ValidationErrorKind.BUSINESS_RULE_VIOLATION, message=rule)

    @classmethod
    def custom(cls, message: str) -> "ValidationError":
        return cls(ValidationErrorKind.CUSTOM, message=message)

    @property
    def field_name(self) -> Optional[str]:
        """Field the error refers to; None for business-rule and custom errors."""
        if self.kind in (ValidationErrorKind.BUSINESS_RULE_VIOLATION, ValidationErrorKind.CUSTOM):
            return None
        return self.field

    @property
    def description(self) -> str:
        """Human-readable description."""
        kind = self.kind
        if kind is ValidationErrorKind.REQUIRED_FIELD_MISSING:
            return f"Required field '{self.field}' is missing"
        if kind is ValidationErrorKind.INVALID_FORMAT:
            return f"Field '{self.field}' has invalid format. Expected: {self.expected}"
        if kind is ValidationErrorKind.VALUE_OUT_OF_RANGE:
            return (
                f"Field '{self.field}' value '{self.value}' is out of range. "
                f"Valid range: {self.expected}"
            )
        if kind is ValidationErrorKind.DUPLICATE_VALUE:
            return f"Field '{self.field}' value '{self.value}' already exists"
        if kind is ValidationErrorKind.INVALID_RELATIONSHIP:
            return f"Field '{self.field}' has invalid relationship: {self.message}"
        if kind is ValidationErrorKind.BUSINESS_RULE_VIOLATION:
            return f"Business rule violation: {self.message}"
        return self.message or ""

    def __str__(self) -> str:
        return self.description

    def prefixed(self, prefix: str) -> "ValidationError":
        """Copy with the field name qualified by a parent path (``prefix.field``)."""
        if self.field is None:
            return self
        return ValidationError(
            kind=self.kind,
            field=f"{prefix}.{self.field}",
            value=self.value,
            expected=self.expected,
            message=self.message,
        )

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "field": self.field,
            "description": self.description,
        }


# ---------------------------------------------------------------------------
# Primitive validators. Each returns None when the check passes.
# ---------------------------------------------------------------------------

def validate_required_string(value: Optional[str], field: str) -> Optional[ValidationError]:
    """Fail when the value is None or blank after trimming whitespace."""
    if value is None or not str(value).strip():
        return ValidationError.required_field_missing(field)
    return None


def validate_string_pattern(value: Optional[str], pattern: str, field: str) -> Optional[ValidationError]:
    """Fail when a present value does not fully match the pattern. None passes."""
    if value is None:
        return None
    if re.fullmatch(pattern, value) is None:
        return ValidationError.invalid_format(field, f"Must match pattern: {pattern}")
    return None


def validate_numeric_range(
    value: Optional[Union[int, float]],
    minimum: Union[int, float],
    maximum: Union[int, float],
    field: str,
) -> Optional[ValidationError]:
    """Fail when a present value lies outside [minimum, maximum]. None passes."""
    if value is None:
        return None
    if minimum <= value <= maximum:
        return None
    return ValidationError.value_out_of_range(field, f"{value}", f"{minimum} to {maximum}")


def validate_date_range(
    value: Optional[Union[date, datetime]],
    earliest: Union[date, datetime],
    latest: Union[date, datetime],
    field: str,
) -> Optional[ValidationError]:
    """Fail when a present date lies outside [earliest, latest]. None passes."""
    if value is None:
        return None
    if earliest <= value <= latest:
        return None
    return ValidationError.value_out_of_range(
        field,
        _format_date(value),
        f"{_format_date(earliest)} to {_format_date(latest)}",
    )


def _format_date(value: Union[date, datetime]) -> str:
    return value.strftime("%b %d, %Y")


# ---------------------------------------------------------------------------
# Rule composition
# ---------------------------------------------------------------------------

RuleResult = Union[None, ValidationError, Iterable[ValidationError]]


@dataclass(frozen=True)
class Rule:
    """A named check producing zero or more validation errors."""
    name: str
    check: Callable[[Any], RuleResult]

    def apply(self, obj: Any) -> List[ValidationError]:
        result = self.check(obj)
        if result is None:
            return []
        if isinstance(result, ValidationError):
            return [result]
        return list(result)


def run_rules(obj: Any, rules: Iterable[Rule]) -> List[ValidationError]:
    """Evaluate every rule against obj and concatenate the errors in order."""
    errors: List[ValidationError] = []
    for rule in rules:
        errors.extend(rule.apply(obj))
    return errors


def required(field: str, getter: Callable[[Any], Optional[str]]) -> Rule:
    return Rule(f"required:{field}", lambda obj: validate_required_string(getter(obj), field))


def pattern(field: str, getter: Callable[[Any], Optional[str]], regex: str) -> Rule:
    return Rule(f"pattern:{field}", lambda obj: validate_string_pattern(getter(obj), regex, field))


def numeric_range(
    field: str,
    getter: Callable[[Any], Optional[Union[int, float]]],
    minimum: Union[int, float],
    maximum: Union[int, float],
) -> Rule:
    return Rule(
        f"range:{field}",
        lambda obj: validate_numeric_range(getter(obj), minimum, maximum, field),
    )


def each_pattern(field: str, getter: Callable[[Any], Iterable[str]], regex: str) -> Rule:
    """Pattern-check every element of a list, naming each as ``field[i]``."""
    def check(obj):
        return [
            error
            for index, item in enumerate(getter(obj) or [])
            for error in [validate_string_pattern(item, regex, f"{field}[{index}]")]
            if error is not None
        ]
    return Rule(f"each:{field}", check)


def nested(name: str, getter: Callable[[Any], Optional["Validatable"]]) -> Rule:
    """Append a nested value's own errors (flattened, field names untouched)."""
    def check(obj):
        value = getter(obj)
        return value.validate() if value is not None else None
    return Rule(f"nested:{name}", check)


class Validatable:
    """
    Mixin for values that validate themselves.

    Subclasses implement rules(); validate() and is_valid come for free.
    """

    def rules(self) -> List[Rule]:
        return []

    def validate(self) -> List[ValidationError]:
        """Return every validation error (empty list = valid)."""
        return run_rules(self, self.rules())

    @property
    def is_valid(self) -> bool:
        return not self.validate()

    def validate_or_raise(self) -> None:
        """
        Raise ValidationFailed carrying the full batch of errors.

        Raises:
            ValidationFailed: If validate() returns any errors
        """
        errors = self.validate()
        if errors:
            raise ValidationFailed(errors)
