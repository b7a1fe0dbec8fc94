import logging
import random

from yomiage.services.calculation import Calculation, Operator
from yomiage.services.verbalize import MAX_DIGITS

logger = logging.getLogger("yomiage")


class ConfigurationError(ValueError):
    pass


def validate_settings(operand_count: int, min_digits: int, max_digits: int):
    if operand_count < 2:
        raise ConfigurationError(
            f"operand_count must be at least 2, got {operand_count}"
        )
    if min_digits < 1:
        raise ConfigurationError(f"min_digits must be at least 1, got {min_digits}")
    if min_digits > max_digits:
        raise ConfigurationError(
            f"min_digits ({min_digits}) exceeds max_digits ({max_digits})"
        )
    if max_digits > MAX_DIGITS:
        raise ConfigurationError(
            f"max_digits ({max_digits}) exceeds the {MAX_DIGITS}-digit limit"
        )


def random_number(digits: int, rng: random.Random | None = None) -> int:
    """Uniform random integer with exactly ``digits`` digits."""
    rng = rng or random
    return rng.randint(10 ** (digits - 1), 10**digits - 1)


def generate(
    operand_count: int,
    min_digits: int,
    max_digits: int,
    rng: random.Random | None = None,
) -> Calculation:
    """Random problem with at least one operand at each digit-range bound.

    One operand gets exactly ``min_digits`` digits, a different one exactly
    ``max_digits`` (when the bounds differ); the rest are uniform over the
    range. Operators are independent coin flips.
    """
    validate_settings(operand_count, min_digits, max_digits)
    rng = rng or random.Random()

    indices = list(range(operand_count))
    min_index = rng.choice(indices)
    max_index = None
    if max_digits > min_digits:
        max_index = rng.choice([i for i in indices if i != min_index])

    numbers = []
    for i in indices:
        if i == min_index:
            digits = min_digits
        elif i == max_index:
            digits = max_digits
        else:
            digits = rng.randint(min_digits, max_digits)
        numbers.append(random_number(digits, rng))

    operators = [
        rng.choice((Operator.ADD, Operator.SUBTRACT))
        for _ in range(operand_count - 1)
    ]

    calc = Calculation(numbers=tuple(numbers), operators=tuple(operators))
    logger.debug(
        "Generated %d-operand problem (%d-%d digits): %s",
        operand_count, min_digits, max_digits, calc.expression,
    )
    return calc
