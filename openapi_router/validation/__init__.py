"""Declarative Parameter Validation

SchemaTypes are the single source of truth for a parameter's runtime
validation and its JSON Schema documentation. Raw request values are strings;
each type coerces them into native values or reports a field error, and the
pipeline collects every field error of a request before failing.

Key Features:
- Closed set of schema types (Num, Int, Str, Bool, DateTime, DateOnly,
  Email, Uuid, Enumeration, Arr) plus the Custom extension variant
- Shorthand normalization (int, str, datetime, Enum classes, ...)
- Query/Path declarations with option merging
- Collect-all error accumulation returned as a Result

Usage:
    from openapi_router.validation import Int, Query, Path, ValidationPipeline

    parameters = {"todoId": Path(Int), "page": Query(Int(default=1), required=False)}
    result = ValidationPipeline(parameters).run(query={}, path={"todoId": "7"})
    result.unwrap()   # {"todoId": 7, "page": 1}
"""

# Schema types
from .types import (
    SchemaKind,
    SchemaType,
    Num,
    Int,
    Str,
    FormattedStr,
    DateTime,
    DateOnly,
    Email,
    Uuid,
    Bool,
    Enumeration,
    Arr,
    Custom,
    to_schema_type,
)

# Atomic validators
from .validators import (
    AtomicValidator,
    OneOf,
    RegexPattern,
    EmailValidator,
    UUIDValidator,
)

# Coercion
from .coercion import (
    CoercionRule,
    StringToInt,
    StringToFloat,
    StringToBool,
    ISO8601ToDateTime,
    ISO8601ToDate,
)

# Parameters
from .parameters import (
    ParameterLocation,
    ParameterDeclaration,
    Query,
    Path,
)

# Validation errors
from .errors import (
    FieldError,
    ValidationError,
    FieldErrorAccumulator,
)

# Pipeline
from .pipeline import (
    ValidationPipeline,
    validate_parameters,
)

__all__ = [
    # Schema types
    "SchemaKind",
    "SchemaType",
    "Num",
    "Int",
    "Str",
    "FormattedStr",
    "DateTime",
    "DateOnly",
    "Email",
    "Uuid",
    "Bool",
    "Enumeration",
    "Arr",
    "Custom",
    "to_schema_type",
    # Validators
    "AtomicValidator",
    "OneOf",
    "RegexPattern",
    "EmailValidator",
    "UUIDValidator",
    # Coercion
    "CoercionRule",
    "StringToInt",
    "StringToFloat",
    "StringToBool",
    "ISO8601ToDateTime",
    "ISO8601ToDate",
    # Parameters
    "ParameterLocation",
    "ParameterDeclaration",
    "Query",
    "Path",
    # Errors
    "FieldError",
    "ValidationError",
    "FieldErrorAccumulator",
    # Pipeline
    "ValidationPipeline",
    "validate_parameters",
]
