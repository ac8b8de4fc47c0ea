"""Explicit Coercion Rules

Raw request values arrive as strings (query string, path segments) while
declared defaults arrive as native Python values. Each rule accepts both and
produces the declared type, or an Err carrying the field-level message.

Nothing is lost silently: fractional integers, NaN and infinities are
rejected rather than rounded or passed through.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Generic, TypeVar
import math

from openapi_router.errors import (
    AppError, Ok, Result,
    invalid_boolean, invalid_format, invalid_integer, invalid_number,
)

T = TypeVar("T")
S = TypeVar("S")


@dataclass(frozen=True, slots=True)
class CoercionRule(ABC, Generic[S, T]):
    """Turns one raw or default value into the declared Python type, or an Err."""

    @abstractmethod
    def coerce(self, value: Any) -> Result[T, AppError]:
        """Ok(converted value) or the Err for a bad value."""


@dataclass(frozen=True, slots=True)
class StringToInt(CoercionRule[str, int]):
    """Coerce string to integer.

    With ``allow_float_strings`` the value is parsed as a number first, so
    "7.0" and "1e3" are accepted as long as no fractional remainder is left.
    """
    allow_float_strings: bool = True

    def coerce(self, value: Any) -> Result[int, AppError]:
        if isinstance(value, bool):
            return invalid_integer(value)
        if isinstance(value, int):
            return Ok(value)
        if isinstance(value, float):
            return self._from_float(value, value)
        if not isinstance(value, str) or not (stripped := value.strip()) or "_" in stripped:
            return invalid_integer(value)

        try:
            return Ok(int(stripped))
        except ValueError:
            if not self.allow_float_strings:
                return invalid_integer(value)
        try:
            return self._from_float(float(stripped), value)
        except ValueError:
            return invalid_integer(value)

    @staticmethod
    def _from_float(number: float, original: Any) -> Result[int, AppError]:
        if not math.isfinite(number) or not number.is_integer():
            return invalid_integer(original)
        return Ok(int(number))


@dataclass(frozen=True, slots=True)
class StringToFloat(CoercionRule[str, float]):
    """Coerce string to float, rejecting NaN and infinities."""

    def coerce(self, value: Any) -> Result[float, AppError]:
        if isinstance(value, bool):
            return invalid_number(value)
        if isinstance(value, (int, float)):
            number = float(value)
        elif isinstance(value, str) and value.strip() and "_" not in value:
            try:
                number = float(value.strip())
            except ValueError:
                return invalid_number(value)
        else:
            return invalid_number(value)

        if not math.isfinite(number):
            return invalid_number(value)
        return Ok(number)


@dataclass(frozen=True, slots=True)
class StringToBool(CoercionRule[str, bool]):
    """Coerce string to boolean.

    Matching is case-insensitive; native booleans pass through.
    """
    true_values: frozenset[str] = frozenset({"true"})
    false_values: frozenset[str] = frozenset({"false"})

    def coerce(self, value: Any) -> Result[bool, AppError]:
        if isinstance(value, bool):
            return Ok(value)
        if not isinstance(value, str):
            return invalid_boolean(value)

        lower = value.strip().lower()
        if lower in self.true_values:
            return Ok(True)
        if lower in self.false_values:
            return Ok(False)
        return invalid_boolean(value)


@dataclass(frozen=True, slots=True)
class ISO8601ToDateTime(CoercionRule[str, datetime]):
    """Coerce ISO8601 string to datetime."""

    def coerce(self, value: Any) -> Result[datetime, AppError]:
        if isinstance(value, datetime):
            return Ok(value)
        if not isinstance(value, str):
            return invalid_format(value, "date-time")
        try:
            return Ok(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            return invalid_format(value, "date-time")


@dataclass(frozen=True, slots=True)
class ISO8601ToDate(CoercionRule[str, date]):
    """Coerce ISO8601 string to date."""

    def coerce(self, value: Any) -> Result[date, AppError]:
        if isinstance(value, date) and not isinstance(value, datetime):
            return Ok(value)
        if not isinstance(value, str):
            return invalid_format(value, "date")
        try:
            return Ok(date.fromisoformat(value.strip()))
        except ValueError:
            return invalid_format(value, "date")
