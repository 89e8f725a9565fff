"""Validation rules applied to field writes.

Each rule inspects a proposed value and returns an error message, or ``None``
when the value is acceptable. Rules carry a stable ``code`` so callers can
branch on the kind of failure without parsing messages.
"""

import re
from abc import ABC, abstractmethod
from enum import Enum
from numbers import Real
from typing import Any, ClassVar, Optional


class RuleCode(str, Enum):
    """Stable identifiers for validation failures."""
    NOT_EMPTY = "not_empty"
    MAX_LENGTH = "max_length"
    NUMERIC_RANGE = "numeric_range"
    POSITION = "position"
    ID = "id"


class ValidationRule(ABC):
    """A single check in a field's rule chain."""

    code: ClassVar[RuleCode]

    @abstractmethod
    def validate(self, current: Any, value: Any) -> Optional[str]:
        """Return an error message if ``value`` may not replace ``current``."""


class NotNullOrWhiteSpaceRule(ValidationRule):
    code = RuleCode.NOT_EMPTY

    def validate(self, current: Any, value: Any) -> Optional[str]:
        if value is None or (isinstance(value, str) and not value.strip()):
            return "Value cannot be null, empty, or whitespace."
        return None


class MaxLengthRule(ValidationRule):
    code = RuleCode.MAX_LENGTH

    def __init__(self, max_length: int):
        self.max_length = max_length

    def validate(self, current: Any, value: Any) -> Optional[str]:
        if value is not None and len(value) > self.max_length:
            return f"Value cannot be longer than {self.max_length} characters."
        return None


class NumericRangeRule(ValidationRule):
    """Bounded numeric check; either bound may be omitted."""

    code = RuleCode.NUMERIC_RANGE

    def __init__(self, minimum: Optional[float] = None, maximum: Optional[float] = None):
        self.minimum = minimum
        self.maximum = maximum

    def validate(self, current: Any, value: Any) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, Real):
            return "Value must be a number."
        if self.minimum is not None and value < self.minimum:
            return f"Value must be at least {self.minimum}."
        if self.maximum is not None and value > self.maximum:
            return f"Value must be at most {self.maximum}."
        return None


class PositionRule(ValidationRule):
    """Positions are "top", "bottom" or a positive number."""

    code = RuleCode.POSITION

    NAMED_POSITIONS = ("top", "bottom")

    def validate(self, current: Any, value: Any) -> Optional[str]:
        if value is None:
            return "Position cannot be null."
        if isinstance(value, str):
            if value in self.NAMED_POSITIONS:
                return None
            return f"Position must be one of {', '.join(self.NAMED_POSITIONS)} or a positive number."
        if isinstance(value, bool) or not isinstance(value, Real) or value <= 0:
            return "Position must be a positive number."
        return None


class IdRule(ValidationRule):
    """Remote ids are 24 lowercase hex characters."""

    code = RuleCode.ID

    _pattern = re.compile(r"[a-f0-9]{24}")

    def validate(self, current: Any, value: Any) -> Optional[str]:
        if not isinstance(value, str) or not self._pattern.fullmatch(value):
            return "Value is not a valid id."
        return None


# Stateless rules are shared
NOT_EMPTY = NotNullOrWhiteSpaceRule()
POSITION = PositionRule()
VALID_ID = IdRule()
