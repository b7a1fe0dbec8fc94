"""Spoken phrase for a whole problem, in soroban dictation style.

  ねがいましては、いっせんえんなり、ひいては、にせんえんなり、くわえて、さんぜんえんなり、えんでは

An operator word is only spoken where the operator changes: a run of
identical operators carries one word, and a leading add is silent.
"""

from typing import Iterator

from yomiage.services.calculation import Calculation, Operator
from yomiage.services.verbalize import verbalize

OPENING = "ねがいましては"
COUNTER = "えんなり"
CLOSING = "えんでは"

OPERATOR_WORDS = {
    Operator.ADD: "くわえて",
    Operator.SUBTRACT: "ひいては",
}

DISPLAY_SEPARATOR = "、"


def spoken_operators(calc: Calculation) -> list[Operator | None]:
    """Operator word to speak before each operand after the first, or None."""
    calc.validate()
    spoken: list[Operator | None] = []
    previous = Operator.ADD
    for op in calc.operators:
        spoken.append(op if op is not previous else None)
        previous = op
    return spoken


def clauses(calc: Calculation) -> Iterator[str]:
    spoken = spoken_operators(calc)
    yield OPENING
    yield verbalize(calc.numbers[0]) + COUNTER
    for op, number in zip(spoken, calc.numbers[1:]):
        if op is not None:
            yield OPERATOR_WORDS[op]
        yield verbalize(number) + COUNTER
    yield CLOSING


def assemble(calc: Calculation, separator: str = "") -> str:
    """Speech variant: clauses run together with no punctuation."""
    return separator.join(clauses(calc))


def assemble_for_display(calc: Calculation) -> str:
    return assemble(calc, separator=DISPLAY_SEPARATOR)


def count_operator_words(calc: Calculation) -> int:
    return sum(1 for op in spoken_operators(calc) if op is not None)
