"""Habit enums: one type per concept, carrying both wire and storage forms.

Storage uses the uppercase member value (``DAILY``); the JSON API uses the
lowercase wire form (``daily``).
"""

from __future__ import annotations

import enum

DEFAULT_HABIT_COLOR = "#3B82F6"


class _WireEnum(str, enum.Enum):
    @property
    def wire(self) -> str:
        return self.value.lower()

    @classmethod
    def from_wire(cls, value: "str | _WireEnum"):
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValueError(f"invalid {cls.__name__.lower()}: {value!r}") from None

    @classmethod
    def wire_values(cls) -> tuple[str, ...]:
        return tuple(member.wire for member in cls)


class Frequency(_WireEnum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class GoalType(_WireEnum):
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


__all__ = ["DEFAULT_HABIT_COLOR", "Frequency", "GoalType"]
