"""Schema Types

A closed set of leaf types, each a frozen dataclass that knows how to
validate/coerce one raw value and how to render itself as a JSON Schema
fragment. Both views read the same attribute set, so the runtime validator
and the generated document cannot drift apart.

Check order for every type (each stage can short-circuit):
1. absent value + declared default -> the default is used as the value
2. still absent -> "is required" when required, else Ok(None)
3. declared enum -> membership check; numbers and booleans compare coerced
   values, everything else compares string forms (optionally ignoring case)
4. type-specific coercion

Usage:
    page = Int(default=1, required=False)
    page.validate("3")            # Ok(3)
    page.validate(None)           # Ok(1)
    page.validate("abc")          # Err(AppError("is not a valid integer"))
    page.to_json_schema()         # {"type": "integer", "default": 1}
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, ClassVar
from uuid import UUID

from openapi_router.errors import (
    AppError, Err, Ok, Result, SchemaDefinitionError,
    invalid_enum, invalid_format, invalid_type, required_field,
)

from .coercion import (
    CoercionRule, ISO8601ToDate, ISO8601ToDateTime,
    StringToBool, StringToFloat, StringToInt,
)
from .validators import AtomicValidator, EmailValidator, OneOf, RegexPattern, UUIDValidator


class SchemaKind(str, Enum):
    """Discriminant tag, one per supported leaf type."""
    NUMBER = "number"
    INTEGER = "integer"
    STRING = "string"
    BOOLEAN = "boolean"
    DATE_TIME = "date-time"
    DATE_ONLY = "date"
    EMAIL = "email"
    UUID = "uuid"
    ENUMERATION = "enumeration"
    ARRAY = "array"
    CUSTOM = "custom"


@dataclass(frozen=True, slots=True, kw_only=True)
class SchemaType(ABC):
    """Base for all leaf schema types.

    Attributes:
        description: Human-readable description, rendered in the document
        example: Example value for documentation
        default: Substituted when the raw value is absent (None = no default)
        required: Whether an absent value is an error
        enum: Allowed values, checked before coercion
        enum_case_sensitive: Exact vs case-insensitive enum matching
        format: JSON Schema string subtype hint (e.g. "date")
    """
    kind: ClassVar[SchemaKind]
    json_type: ClassVar[str]
    multi: ClassVar[bool] = False
    enum_by_value: ClassVar[bool] = False

    description: str | None = None
    example: Any = None
    default: Any = None
    required: bool = True
    enum: tuple[Any, ...] | None = None
    enum_case_sensitive: bool = True
    format: str | None = None

    def __post_init__(self) -> None:
        self._check_definition()

    # -- definition-time checks ------------------------------------------------

    def _check_definition(self) -> None:
        if not isinstance(self.required, bool):
            raise SchemaDefinitionError(
                f"{type(self).__name__}.required must be a bool, got {self.required!r}")

        if self.enum is not None:
            if isinstance(self.enum, (str, bytes)) or not isinstance(self.enum, (list, tuple)):
                raise SchemaDefinitionError(
                    f"{type(self).__name__}.enum must be a list or tuple, got {type(self.enum).__name__}")
            if not self.enum:
                raise SchemaDefinitionError(f"{type(self).__name__}.enum must not be empty")
            object.__setattr__(self, "enum", tuple(self.enum))
            if type(self).enum_by_value and (bad := [o for o in self.enum if self._coerce(o).is_err()]):
                raise SchemaDefinitionError(
                    f"{type(self).__name__}.enum values must be valid {self.json_type}s, got {bad!r}")

        if self.default is not None:
            if self.enum is not None and not self._enum_accepts(self.default):
                raise SchemaDefinitionError(
                    f"Default {self.default!r} is not one of the declared enum values",
                    default=self.default, enum=list(self.enum))
            if (coerced := self._coerce(self.default)).is_err():
                raise SchemaDefinitionError(
                    f"Default {self.default!r} for {type(self).__name__} {coerced.unwrap_err().message}",
                    default=self.default)

    # -- runtime validation ----------------------------------------------------

    def validate(self, raw: Any) -> Result[Any, AppError]:
        """Validate and coerce one raw value."""
        value = self.default if raw is None else raw
        if value is None:
            return required_field() if self.required else Ok(None)
        return self.validate_present(value)

    def validate_present(self, value: Any) -> Result[Any, AppError]:
        """Enum and coercion stages for a value known to be present."""
        if self.enum is not None and not self._enum_accepts(value):
            return invalid_enum(value, list(self.enum))
        return self._coerce(value)

    def _enum_accepts(self, value: Any) -> bool:
        if type(self).enum_by_value:
            coerced = self._coerce(value)
            return coerced.is_ok() and coerced.unwrap() in [self._coerce(o).unwrap() for o in self.enum]
        checker = OneOf(*(str(option) for option in self.enum), case_sensitive=self.enum_case_sensitive)
        return checker.accepts(str(value))

    @abstractmethod
    def _coerce(self, value: Any) -> Result[Any, AppError]:
        """Type-specific coercion of a present value."""

    # -- document rendering ----------------------------------------------------

    def to_json_schema(self) -> dict[str, Any]:
        """Render as a JSON Schema fragment."""
        schema: dict[str, Any] = {"type": self._json_type()}
        if self.format:
            schema["format"] = self.format
        if self.description:
            schema["description"] = self.description
        if self.enum is not None:
            schema["enum"] = list(self.enum)
        if self.default is not None:
            schema["default"] = self._render_default()
        if self.example is not None:
            schema["example"] = self.example
        return schema

    def _json_type(self) -> str:
        return self.json_type

    def _render_default(self) -> Any:
        return self._coerce(self.default).unwrap()


# ============================================================================
# Numeric / Boolean
# ============================================================================

@dataclass(frozen=True, slots=True, kw_only=True)
class Num(SchemaType):
    """Floating point number."""
    kind: ClassVar[SchemaKind] = SchemaKind.NUMBER
    json_type: ClassVar[str] = "number"
    enum_by_value: ClassVar[bool] = True
    rule: ClassVar[CoercionRule] = StringToFloat()

    def _coerce(self, value: Any) -> Result[Any, AppError]:
        return Num.rule.coerce(value)


@dataclass(frozen=True, slots=True, kw_only=True)
class Int(SchemaType):
    """Integer; numeric input with a fractional remainder is rejected."""
    kind: ClassVar[SchemaKind] = SchemaKind.INTEGER
    json_type: ClassVar[str] = "integer"
    enum_by_value: ClassVar[bool] = True
    rule: ClassVar[CoercionRule] = StringToInt()

    def _coerce(self, value: Any) -> Result[Any, AppError]:
        return Int.rule.coerce(value)


@dataclass(frozen=True, slots=True, kw_only=True)
class Bool(SchemaType):
    """Boolean from "true"/"false" (any case) or a native bool."""
    kind: ClassVar[SchemaKind] = SchemaKind.BOOLEAN
    json_type: ClassVar[str] = "boolean"
    enum_by_value: ClassVar[bool] = True
    rule: ClassVar[CoercionRule] = StringToBool()

    def _coerce(self, value: Any) -> Result[Any, AppError]:
        return Bool.rule.coerce(value)


# ============================================================================
# Strings
# ============================================================================

@dataclass(frozen=True, slots=True, kw_only=True)
class Str(SchemaType):
    """Plain string. ``format`` is a documentation hint only."""
    kind: ClassVar[SchemaKind] = SchemaKind.STRING
    json_type: ClassVar[str] = "string"

    def _coerce(self, value: Any) -> Result[Any, AppError]:
        if not isinstance(value, str):
            return invalid_type(value, "string")
        return Ok(value)


@dataclass(frozen=True, slots=True, kw_only=True)
class FormattedStr(Str):
    """String with a fixed format that is checked, not just documented.

    The validated value stays a string; subclasses pick the checks.
    """
    validator: ClassVar[AtomicValidator | None] = None
    parser: ClassVar[CoercionRule | None] = None

    def _coerce(self, value: Any) -> Result[Any, AppError]:
        cls = type(self)
        if isinstance(value, (date, UUID)):
            value = value.isoformat() if isinstance(value, date) else str(value)
        if not isinstance(value, str):
            return invalid_format(value, self.format or cls.kind.value)
        if cls.validator is not None and not cls.validator.accepts(value):
            return invalid_format(value, self.format or cls.kind.value)
        if cls.parser is not None and cls.parser.coerce(value).is_err():
            return invalid_format(value, self.format or cls.kind.value)
        return Ok(value)


@dataclass(frozen=True, slots=True, kw_only=True)
class DateTime(FormattedStr):
    """ISO 8601 date-time string."""
    kind: ClassVar[SchemaKind] = SchemaKind.DATE_TIME
    validator: ClassVar[AtomicValidator | None] = RegexPattern(
        r"\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?",
        description="iso8601_datetime",
    )
    parser: ClassVar[CoercionRule | None] = ISO8601ToDateTime()

    format: str | None = "date-time"
    example: Any = "2024-01-15T10:30:00Z"


@dataclass(frozen=True, slots=True, kw_only=True)
class DateOnly(FormattedStr):
    """ISO 8601 calendar date string (YYYY-MM-DD)."""
    kind: ClassVar[SchemaKind] = SchemaKind.DATE_ONLY
    validator: ClassVar[AtomicValidator | None] = RegexPattern(r"\d{4}-\d{2}-\d{2}", description="iso8601_date")
    parser: ClassVar[CoercionRule | None] = ISO8601ToDate()

    format: str | None = "date"
    example: Any = "2024-01-15"


@dataclass(frozen=True, slots=True, kw_only=True)
class Email(FormattedStr):
    kind: ClassVar[SchemaKind] = SchemaKind.EMAIL
    validator: ClassVar[AtomicValidator | None] = EmailValidator()

    format: str | None = "email"
    example: Any = "user@example.com"


@dataclass(frozen=True, slots=True, kw_only=True)
class Uuid(FormattedStr):
    kind: ClassVar[SchemaKind] = SchemaKind.UUID
    validator: ClassVar[AtomicValidator | None] = UUIDValidator()

    format: str | None = "uuid"
    example: Any = "550e8400-e29b-41d4-a716-446655440000"


# ============================================================================
# Enumeration
# ============================================================================

@dataclass(frozen=True, slots=True)
class Enumeration(SchemaType):
    """Closed set of labels, each mapped to an underlying value.

    ``values`` may be a sequence of labels (each label maps to itself), a
    mapping of label -> value, or an ``Enum`` class (labels are the string
    member values, or member names for non-string values; validation yields
    the member). Validation returns the underlying value, not the label. A
    default may be given as a label or as an underlying value.

    Usage:
        fmt = Enumeration({"json": "application/json", "csv": "text/csv"},
                          enum_case_sensitive=False)
        fmt.validate("JSON")          # Ok("application/json")
    """
    kind: ClassVar[SchemaKind] = SchemaKind.ENUMERATION
    json_type: ClassVar[str] = "string"

    values: Any = ()
    choices: tuple[tuple[str, Any], ...] = field(init=False, default=())

    def __post_init__(self) -> None:
        choices = self._build_choices(self.values)
        if not choices:
            raise SchemaDefinitionError("Enumeration requires at least one value")

        labels = [label for label, _ in choices]
        if bad := [label for label in labels if not isinstance(label, str)]:
            raise SchemaDefinitionError(f"Enumeration labels must be strings, got {bad!r}")
        seen = [label if self.enum_case_sensitive else label.lower() for label in labels]
        if len(set(seen)) != len(seen):
            raise SchemaDefinitionError(
                f"Enumeration labels must be unique{'' if self.enum_case_sensitive else ' (case-insensitively)'}",
                labels=labels)

        object.__setattr__(self, "choices", choices)
        object.__setattr__(self, "enum", tuple(labels))
        if self.default is not None and not self._enum_accepts(self.default):
            # A default given as an underlying value (e.g. an Enum member) is stored as its label.
            for label, underlying in choices:
                if underlying == self.default:
                    object.__setattr__(self, "default", label)
                    break
        self._check_definition()

    @staticmethod
    def _build_choices(values: Any) -> tuple[tuple[str, Any], ...]:
        if isinstance(values, type) and issubclass(values, Enum):
            return tuple(
                (member.value if isinstance(member.value, str) else member.name, member)
                for member in values
            )
        if isinstance(values, Mapping):
            return tuple(values.items())
        if isinstance(values, (str, bytes)) or not isinstance(values, (list, tuple, set, frozenset)):
            raise SchemaDefinitionError(
                f"Enumeration values must be a sequence, mapping or Enum class, got {type(values).__name__}")
        ordered = sorted(values) if isinstance(values, (set, frozenset)) else values
        return tuple((label, label) for label in ordered)

    @property
    def mapping(self) -> dict[str, Any]:
        """Reverse mapping label -> underlying value."""
        return dict(self.choices)

    def _coerce(self, value: Any) -> Result[Any, AppError]:
        text = value if isinstance(value, str) else str(value)
        for label, underlying in self.choices:
            if label == text or (not self.enum_case_sensitive and label.lower() == text.lower()):
                return Ok(underlying)
        return invalid_enum(value, [label for label, _ in self.choices])

    def _render_default(self) -> Any:
        text = str(self.default)
        for label, _ in self.choices:
            if label == text or (not self.enum_case_sensitive and label.lower() == text.lower()):
                return label
        return self.default


# ============================================================================
# Arrays and extension
# ============================================================================

@dataclass(frozen=True, slots=True)
class Arr(SchemaType):
    """Array of a scalar item type, for repeated query parameters.

    A single raw string is treated as a one-element list. Each element runs
    through the item type's enum and coercion stages.
    """
    kind: ClassVar[SchemaKind] = SchemaKind.ARRAY
    json_type: ClassVar[str] = "array"
    multi: ClassVar[bool] = True

    items: Any = None

    def __post_init__(self) -> None:
        if self.items is None:
            raise SchemaDefinitionError("Arr requires an item type")
        items = to_schema_type(self.items)
        if items.multi:
            raise SchemaDefinitionError("Nested arrays are not supported")
        object.__setattr__(self, "items", items)
        self._check_definition()

    def validate_present(self, value: Any) -> Result[Any, AppError]:
        return self._coerce(value)

    def _coerce(self, value: Any) -> Result[Any, AppError]:
        elements = [value] if isinstance(value, str) else value
        if not isinstance(elements, (list, tuple)):
            return invalid_type(value, "array")
        coerced = []
        for element in elements:
            result = self.items.validate_present(element)
            if result.is_err():
                return result
            coerced.append(result.unwrap())
        return Ok(coerced)

    def to_json_schema(self) -> dict[str, Any]:
        schema = {"type": "array", "items": self.items.to_json_schema()}
        if self.description:
            schema["description"] = self.description
        if self.default is not None:
            schema["default"] = self._render_default()
        if self.example is not None:
            schema["example"] = self.example
        return schema


@dataclass(frozen=True, slots=True)
class Custom(SchemaType):
    """Extension point: a user coercion function plus its JSON type.

    The function receives the present raw value and returns the coerced
    value; raising ValueError or TypeError marks the value invalid.

    Usage:
        color = Custom(lambda v: int(v, 16), type_name="hex color")
        color.validate("ff8800")      # Ok(16746496)
    """
    kind: ClassVar[SchemaKind] = SchemaKind.CUSTOM

    coerce_fn: Callable[[Any], Any] | None = None
    schema_type: str = "string"
    type_name: str = "value"

    def __post_init__(self) -> None:
        if not callable(self.coerce_fn):
            raise SchemaDefinitionError("Custom requires a callable coerce_fn")
        self._check_definition()

    def _json_type(self) -> str:
        return self.schema_type

    def _coerce(self, value: Any) -> Result[Any, AppError]:
        try:
            return Ok(self.coerce_fn(value))
        except (ValueError, TypeError):
            return invalid_type(value, self.type_name)


# ============================================================================
# Shorthand normalization
# ============================================================================

_SHORTHANDS: dict[type, type[SchemaType]] = {
    int: Int,
    float: Num,
    str: Str,
    bool: Bool,
    datetime: DateTime,
    date: DateOnly,
    UUID: Uuid,
}


def to_schema_type(value: Any) -> SchemaType:
    """Normalize a type shorthand to a SchemaType instance.

    Accepts a SchemaType instance (returned as-is), a SchemaType subclass, a
    supported builtin (int, float, str, bool, datetime, date, UUID) or an
    Enum subclass. Everything else is a definition error.
    """
    if isinstance(value, SchemaType):
        return value
    if isinstance(value, type):
        if issubclass(value, SchemaType):
            return value()
        if issubclass(value, Enum):
            return Enumeration(value)
        if value in _SHORTHANDS:
            return _SHORTHANDS[value]()
    raise SchemaDefinitionError(f"Unsupported schema type: {value!r}", value=repr(value))
