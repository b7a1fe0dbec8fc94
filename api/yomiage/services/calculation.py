"""Arithmetic problem value types.

A Calculation is an ordered list of operands joined by add/subtract
operators, e.g. ``12345678 + 23456789 - 1234567``.
"""

from dataclasses import dataclass
from enum import Enum


class InvariantViolation(Exception):
    """Raised when a Calculation does not have exactly one operator between
    each pair of adjacent operands."""


class Operator(str, Enum):
    ADD = "+"
    SUBTRACT = "-"


@dataclass(frozen=True)
class Calculation:
    numbers: tuple[int, ...]
    operators: tuple[Operator, ...]

    def __post_init__(self):
        object.__setattr__(self, "numbers", tuple(self.numbers))
        object.__setattr__(
            self, "operators", tuple(Operator(op) for op in self.operators)
        )

    def validate(self) -> None:
        if len(self.numbers) < 2:
            raise InvariantViolation(
                f"Calculation needs at least 2 operands, got {len(self.numbers)}"
            )
        if len(self.operators) != len(self.numbers) - 1:
            raise InvariantViolation(
                f"Expected {len(self.numbers) - 1} operators for "
                f"{len(self.numbers)} operands, got {len(self.operators)}"
            )

    @property
    def result(self) -> int:
        self.validate()
        total = self.numbers[0]
        for op, number in zip(self.operators, self.numbers[1:]):
            if op is Operator.ADD:
                total += number
            else:
                total -= number
        return total

    @property
    def expression(self) -> str:
        """Plain-text form, e.g. ``12 + 34 - 5``."""
        self.validate()
        parts = [str(self.numbers[0])]
        for op, number in zip(self.operators, self.numbers[1:]):
            parts.append(f"{op.value} {number}")
        return " ".join(parts)

    def to_dict(self) -> dict:
        return {
            "numbers": list(self.numbers),
            "operators": [op.value for op in self.operators],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Calculation":
        return cls(
            numbers=tuple(int(n) for n in data["numbers"]),
            operators=tuple(Operator(op) for op in data["operators"]),
        )
