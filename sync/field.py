"""Lazily loaded, validated property accessor."""

import asyncio
from typing import Any, Generic, TypeVar

from sync.context import SynchronizationContext
from sync.errors import ValidationFault
from sync.validation import ValidationRule

T = TypeVar("T")


class Field(Generic[T]):
    """One named property of a context.

    A field stores nothing itself. Reads go to the context's snapshot (or a
    pending edit), writes go through the rule chain into the context's dirty
    set.
    """

    def __init__(self, context: SynchronizationContext, name: str):
        self._context = context
        self.name = name
        self._rules: list[ValidationRule] = []

    def add_rule(self, rule: ValidationRule) -> "Field[T]":
        self._rules.append(rule)
        return self

    @property
    def current(self) -> T:
        """Last known value, without contacting the server."""
        return self._context.get_value(self.name)

    async def get(self) -> T:
        """Value after making sure the context is fresh."""
        await self._context.ensure_fresh()
        return self.current

    def validate(self, value: Any) -> None:
        """Raise ValidationFault for the first rule ``value`` breaks."""
        current = self.current
        for rule in self._rules:
            message = rule.validate(current, value)
            if message is not None:
                raise ValidationFault(rule.code.value, message, field=self.name)

    def set(self, value: T) -> asyncio.Future:
        """Validate ``value`` and queue it for submission.

        Returns the future of the submit this write joined; it resolves to the
        names the server response changed, or raises the submit's fault.
        """
        self.validate(value)
        if self._context.get_value(self.name) == value:
            return SynchronizationContext._completed([])
        return self._context.set_value(self.name, value)

    def __repr__(self) -> str:
        return f"Field({self.name!r}, {self.current!r})"
