"""String checks used by the schema types.

A validator only answers whether a present string is acceptable; the schema
type decides which field error to report.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any
from uuid import UUID
import re

EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")


class AtomicValidator(ABC):
    @abstractmethod
    def accepts(self, value: Any) -> bool:
        """True when ``value`` passes the check."""


@dataclass(frozen=True, slots=True, init=False)
class OneOf(AtomicValidator):
    """Membership in a fixed set of strings, optionally ignoring case."""
    options: frozenset[str]
    case_sensitive: bool

    def __init__(self, *options: str, case_sensitive: bool = True):
        folded = frozenset(options if case_sensitive else (o.casefold() for o in options))
        object.__setattr__(self, "options", folded)
        object.__setattr__(self, "case_sensitive", case_sensitive)

    def accepts(self, value: Any) -> bool:
        if not isinstance(value, str):
            return False
        return (value if self.case_sensitive else value.casefold()) in self.options


@dataclass(frozen=True, slots=True)
class RegexPattern(AtomicValidator):
    """Whole-string regex match."""
    pattern: str
    description: str = ""

    def accepts(self, value: Any) -> bool:
        return isinstance(value, str) and re.fullmatch(self.pattern, value) is not None


@dataclass(frozen=True, slots=True)
class EmailValidator(AtomicValidator):
    """Bare ``local@domain.tld`` address, no display name."""

    def accepts(self, value: Any) -> bool:
        return isinstance(value, str) and EMAIL_PATTERN.fullmatch(value) is not None


@dataclass(frozen=True, slots=True)
class UUIDValidator(AtomicValidator):
    """Any RFC 4122 textual form ``uuid.UUID`` parses."""

    def accepts(self, value: Any) -> bool:
        if not isinstance(value, str):
            return False
        try:
            UUID(value)
        except ValueError:
            return False
        return True
