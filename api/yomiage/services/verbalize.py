"""Japanese number verbalization.

Converts integers to their spoken hiragana reading for TTS, grouped by
powers of 10,000 (まん, おく, ちょう):
  12345678 → "せんにひゃくさんじゅうよんまんごせんろっぴゃくしちじゅうはち"
  (1234 まん + 5678)

Irregular readings (いっせん, はっちょう, よんまん, ...) live in
EXCEPTION_RULES and the compound tables below; the generic digit walk only
runs when none of them applies.
"""

import re
from dataclasses import dataclass
from typing import Callable

ZERO = "ゼロ"
MINUS = "マイナス"

MAX_DIGITS = 16

DIGITS = {
    1: "いち",
    2: "に",
    3: "さん",
    4: "し",
    5: "ご",
    6: "ろく",
    7: "しち",
    8: "はち",
    9: "きゅう",
}

# Contracted four, used at the ones position and before a scale word
FOUR_CONTRACTED = "よん"

# Position inside a 4-digit group
POSITION_WORDS = {0: "", 1: "じゅう", 2: "ひゃく", 3: "せん"}

FINAL, MAN, OKU, CHOU = 0, 1, 2, 3

SCALE_WORDS = {FINAL: "", MAN: "まん", OKU: "おく", CHOU: "ちょう"}

# (position, digit) → fused reading, any group
COMPOUNDS = {
    (2, 3): "さんびゃく",
    (2, 6): "ろっぴゃく",
    (2, 8): "はっぴゃく",
    (3, 3): "さんぜん",
    (3, 8): "はっせん",
}

# (position, digit) → fused reading, final group only
FINAL_COMPOUNDS = {
    (3, 1): "いっせん",
}


class OutOfRangeError(ValueError):
    pass


@dataclass(frozen=True)
class DigitGroup:
    """Up to four digits sharing one scale word, most significant first."""

    digits: tuple[int, ...]
    scale: int

    @property
    def is_final_group(self) -> bool:
        return self.scale == FINAL

    @property
    def value(self) -> int:
        return int("".join(str(d) for d in self.digits))

    @property
    def ones(self) -> int:
        return self.digits[-1]

    @property
    def tens(self) -> int:
        return self.digits[-2] if len(self.digits) > 1 else 0

    def positions(self):
        """Yield (position, digit) pairs from the most significant digit."""
        size = len(self.digits)
        for i, digit in enumerate(self.digits):
            yield size - 1 - i, digit

    def truncated(self, below: int) -> "DigitGroup":
        """Copy with every position lower than ``below`` zeroed."""
        size = len(self.digits)
        digits = tuple(
            0 if size - 1 - i < below else d for i, d in enumerate(self.digits)
        )
        return DigitGroup(digits, self.scale)


@dataclass(frozen=True)
class ExceptionRule:
    name: str
    matches: Callable[[DigitGroup], bool]
    render: Callable[[DigitGroup], str]


def _whole_group(value: int, *scales: int) -> Callable[[DigitGroup], bool]:
    return lambda g: g.scale in scales and g.value == value


def _trailing(ones: int, *scales: int) -> Callable[[DigitGroup], bool]:
    return lambda g: g.scale in scales and g.ones == ones


def _round_tens(*scales: int) -> Callable[[DigitGroup], bool]:
    return lambda g: g.scale in scales and g.ones == 0 and g.tens != 0


def _fused_ones(prefix: str) -> Callable[[DigitGroup], str]:
    def render(group: DigitGroup) -> str:
        return _read_digits(group.truncated(1)) + prefix + SCALE_WORDS[group.scale]

    return render


def _fused_tens(group: DigitGroup) -> str:
    tens = _read_digit(group.tens, 1, group.is_final_group)
    return (
        _read_digits(group.truncated(2))
        + tens.removesuffix("う")
        + "っ"
        + SCALE_WORDS[group.scale]
    )


# Checked in order before the generic group reading; first match wins.
EXCEPTION_RULES = (
    ExceptionRule("chou-one", _whole_group(1, CHOU), lambda g: "いっちょう"),
    ExceptionRule("chou-eight", _whole_group(8, CHOU), lambda g: "はっちょう"),
    ExceptionRule(
        "eight-whole-group",
        _whole_group(8, MAN, OKU),
        lambda g: DIGITS[8] + SCALE_WORDS[g.scale],
    ),
    ExceptionRule(
        "four-whole-group",
        _whole_group(4, MAN, OKU, CHOU),
        lambda g: FOUR_CONTRACTED + SCALE_WORDS[g.scale],
    ),
    ExceptionRule("chou-trailing-one", _trailing(1, CHOU), _fused_ones("いっ")),
    ExceptionRule("chou-trailing-eight", _trailing(8, CHOU), _fused_ones("はっ")),
    ExceptionRule("chou-round-tens", _round_tens(CHOU), _fused_tens),
)


def _elides_one(position: int, final: bool) -> bool:
    if position == 2:
        return True
    if position in (1, 3):
        return not final
    return False


def _read_digit(digit: int, position: int, final: bool) -> str:
    if final and (position, digit) in FINAL_COMPOUNDS:
        return FINAL_COMPOUNDS[(position, digit)]
    if (position, digit) in COMPOUNDS:
        return COMPOUNDS[(position, digit)]
    if digit == 1 and _elides_one(position, final):
        return POSITION_WORDS[position]
    if digit == 4 and position == 0:
        return FOUR_CONTRACTED
    return DIGITS[digit] + POSITION_WORDS[position]


def _read_digits(group: DigitGroup) -> str:
    return "".join(
        _read_digit(digit, position, group.is_final_group)
        for position, digit in group.positions()
        if digit != 0
    )


def split_groups(n: int) -> list[DigitGroup]:
    """Split a non-negative integer into 4-digit groups, highest scale first."""
    text = str(n)
    groups = []
    scale = FINAL
    while text:
        chunk, text = text[-4:], text[:-4]
        groups.append(DigitGroup(tuple(int(c) for c in chunk), scale))
        scale += 1
    groups.reverse()
    return groups


def read_group(group: DigitGroup) -> str:
    """Read one group followed by its scale word."""
    for rule in EXCEPTION_RULES:
        if rule.matches(group):
            return rule.render(group)
    return _read_digits(group) + SCALE_WORDS[group.scale]


def verbalize(n: int) -> str:
    """Convert a non-negative integer (up to 16 digits) to hiragana."""
    if isinstance(n, bool) or not isinstance(n, int):
        raise TypeError(f"Expected int, got {type(n).__name__}")
    if n < 0:
        raise OutOfRangeError(f"Negative numbers are not supported: {n}")
    if n >= 10**MAX_DIGITS:
        raise OutOfRangeError(
            f"{n} has more than {MAX_DIGITS} digits"
        )
    if n == 0:
        return ZERO

    return "".join(read_group(g) for g in split_groups(n) if g.value)


def verbalize_signed(n: int) -> str:
    """Like verbalize(), reading negative values with a マイナス prefix."""
    if isinstance(n, int) and not isinstance(n, bool) and n < 0:
        return MINUS + verbalize(-n)
    return verbalize(n)


def verbalize_numbers(text: str) -> str:
    """Replace digit sequences in text (commas allowed) with readings."""

    def _replace(m: re.Match) -> str:
        return verbalize(int(m.group(0).replace(",", "")))

    return re.sub(r"\d{1,3}(?:,\d{3})+|\d+", _replace, text)
