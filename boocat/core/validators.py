"""
Field validators.

A validator classifies a submitted value: `validate` returns None when the
value is acceptable, or a human readable reason when it is not.
"""

import re
from abc import ABC, abstractmethod
from typing import Any, Optional

from .errors import FormatDefinitionError, FormatNotFoundError, RecordNotFoundError

YEAR_RE = re.compile(r"[+-]?[0-9]+")

# Largest year a 64-bit signed integer holds
MAX_YEAR = 2 ** 63 - 1


class Validator(ABC):
    """Base class for field validators."""

    @abstractmethod
    def validate(self, value: Any) -> Optional[str]:
        """Return None if valid, otherwise the reason it is not."""

    def __call__(self, value: Any) -> Optional[str]:
        return self.validate(value)


class NoOpValidator(Validator):
    """Accepts anything. Used for fields without validation."""

    def validate(self, value: Any) -> Optional[str]:
        return None

    def __repr__(self):
        return "NoOpValidator()"


ACCEPT_ANYTHING = NoOpValidator()


class RegexValidator(Validator):
    """Validates the string form of a value against a regular expression.

    By default the expression may match anywhere in the value (anchors in the
    pattern decide); with full_match=True the whole value must match.
    """

    reason = "doesn't match regular expression"

    def __init__(self, pattern: str, full_match: bool = False):
        try:
            self.regex = re.compile(pattern)
        except re.error as e:
            raise FormatDefinitionError(f"Invalid regular expression '{pattern}': {e}") from e
        self.pattern = pattern
        self.full_match = full_match

    def validate(self, value: Any) -> Optional[str]:
        text = str(value)
        if self.full_match:
            matched = self.regex.fullmatch(text)
        else:
            matched = self.regex.search(text)
        if matched is None:
            return self.reason
        return None

    def __repr__(self):
        return f"RegexValidator({self.pattern!r}, full_match={self.full_match})"


class YearValidator(Validator):
    """Accepts non-negative integer year numbers."""

    reason = "not a valid year number"

    def validate(self, value: Any) -> Optional[str]:
        text = str(value)
        if not YEAR_RE.fullmatch(text):
            return self.reason
        try:
            year = int(text)
        except ValueError:
            # Longer than the interpreter's integer string conversion limit
            return self.reason
        if year < 0 or year > MAX_YEAR:
            return self.reason
        return None

    def __repr__(self):
        return "YearValidator()"


class ReferenceValidator(Validator):
    """Validates that a value is the ID of an existing record of a format.

    Every call performs a store read.
    """

    def __init__(self, store, format_name: str):
        self.store = store
        self.format_name = format_name

    def validate(self, value: Any) -> Optional[str]:
        record_id = str(value)
        try:
            self.store.read_one(self.format_name, record_id)
        except (RecordNotFoundError, FormatNotFoundError):
            return f"record of format '{self.format_name}' and ID '{record_id}' not found"
        return None

    def __repr__(self):
        return f"ReferenceValidator({self.format_name!r})"
