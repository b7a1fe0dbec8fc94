"""Tests for the Japanese number verbalizer.

Coverage:
- Zero and single digits
- Final-group readings (いちじゅう, いっせん, さんぜん, はっせん)
- Higher-group overrides (よんまん, はちおく, いっちょう, よんちょう)
- Group skipping and the 16-digit bound
- verbalize_signed / verbalize_numbers
"""

import random
import re

import pytest

from yomiage.services.verbalize import (
    EXCEPTION_RULES,
    MAN,
    CHOU,
    ZERO,
    DigitGroup,
    OutOfRangeError,
    read_group,
    split_groups,
    verbalize,
    verbalize_numbers,
    verbalize_signed,
)


class TestSingleDigits:
    def test_zero(self):
        assert verbalize(0) == ZERO == "ゼロ"

    @pytest.mark.parametrize(
        "n, expected",
        [
            (1, "いち"),
            (2, "に"),
            (3, "さん"),
            (4, "よん"),
            (5, "ご"),
            (6, "ろく"),
            (7, "しち"),
            (8, "はち"),
            (9, "きゅう"),
        ],
    )
    def test_digits(self, n, expected):
        assert verbalize(n) == expected


class TestFinalGroup:
    """Lowest four digits."""

    def test_tens_one_is_read_explicitly(self):
        assert verbalize(10) == "いちじゅう"
        assert verbalize(14) == "いちじゅうよん"

    def test_four_contracted_only_at_ones(self):
        assert verbalize(40) == "しじゅう"
        assert verbalize(44) == "しじゅうよん"
        assert verbalize(400) == "しひゃく"

    def test_hundreds(self):
        assert verbalize(100) == "ひゃく"
        assert verbalize(300) == "さんびゃく"
        assert verbalize(600) == "ろっぴゃく"
        assert verbalize(800) == "はっぴゃく"

    def test_thousands_fusions(self):
        assert verbalize(1000) == "いっせん"
        assert verbalize(3000) == "さんぜん"
        assert verbalize(8000) == "はっせん"
        assert verbalize(4000) == "しせん"

    def test_zeros_are_skipped(self):
        assert verbalize(1001) == "いっせんいち"
        assert verbalize(2020) == "にせんにじゅう"

    def test_full_group(self):
        assert verbalize(1234) == "いっせんにひゃくさんじゅうよん"
        assert verbalize(5678) == "ごせんろっぴゃくしちじゅうはち"


class TestHigherGroups:
    def test_man(self):
        assert verbalize(10000) == "いちまん"
        assert verbalize(40000) == "よんまん"
        assert verbalize(80000) == "はちまん"

    def test_non_final_leading_one_elided(self):
        assert verbalize(100000) == "じゅうまん"
        assert verbalize(1000000) == "ひゃくまん"
        assert verbalize(10000000) == "せんまん"

    def test_non_final_thousands(self):
        assert verbalize(30000000) == "さんぜんまん"
        assert verbalize(80000000) == "はっせんまん"  # 8000 man; はちおく is one digit longer

    def test_oku(self):
        assert verbalize(100000000) == "いちおく"
        assert verbalize(400000000) == "よんおく"
        assert verbalize(800000000) == "はちおく"

    def test_chou(self):
        assert verbalize(10**12) == "いっちょう"
        assert verbalize(4 * 10**12) == "よんちょう"
        assert verbalize(8 * 10**12) == "はっちょう"
        assert verbalize(6 * 10**12) == "ろくちょう"

    def test_chou_fused_endings(self):
        assert verbalize(10 * 10**12) == "じゅっちょう"
        assert verbalize(11 * 10**12) == "じゅういっちょう"
        assert verbalize(18 * 10**12) == "じゅうはっちょう"
        assert verbalize(20 * 10**12) == "にじゅっちょう"

    def test_empty_groups_contribute_nothing(self):
        assert verbalize(100000001) == "いちおくいち"
        assert verbalize(10**12 + 1) == "いっちょういち"

    def test_mixed(self):
        assert verbalize(12345678) == (
            "せんにひゃくさんじゅうよんまんごせんろっぴゃくしちじゅうはち"
        )

    def test_max_supported(self):
        text = verbalize(10**16 - 1)
        assert text.startswith("きゅうせんきゅうひゃくきゅうじゅうきゅうちょう")
        assert text.endswith("きゅうせんきゅうひゃくきゅうじゅうきゅう")


class TestGroups:
    def test_split_groups(self):
        groups = split_groups(123456789)
        assert [g.digits for g in groups] == [(1,), (2, 3, 4, 5), (6, 7, 8, 9)]
        assert [g.scale for g in groups] == [2, 1, 0]
        assert groups[-1].is_final_group
        assert not groups[0].is_final_group

    def test_exception_rules_take_priority(self):
        group = DigitGroup((1,), CHOU)
        assert any(rule.matches(group) for rule in EXCEPTION_RULES)
        assert read_group(group) == "いっちょう"

    def test_generic_reading_with_scale(self):
        assert read_group(DigitGroup((2, 0, 0, 5), MAN)) == "にせんごまん"


class TestDomain:
    def test_rejects_more_than_16_digits(self):
        with pytest.raises(OutOfRangeError):
            verbalize(10**16)

    def test_rejects_negative(self):
        with pytest.raises(OutOfRangeError):
            verbalize(-1)

    def test_out_of_range_is_value_error(self):
        with pytest.raises(ValueError):
            verbalize(10**20)

    def test_rejects_non_int(self):
        with pytest.raises(TypeError):
            verbalize(1.5)
        with pytest.raises(TypeError):
            verbalize(True)

    def test_pure_and_fully_verbalized(self):
        rng = random.Random(1234)
        for _ in range(2000):
            digits = rng.randint(1, 16)
            n = rng.randint(10 ** (digits - 1), 10**digits - 1)
            text = verbalize(n)
            assert text == verbalize(n)
            assert text
            assert not re.search(r"\d", text)


class TestSigned:
    def test_negative_answer(self):
        assert verbalize_signed(-1000) == "マイナスいっせん"

    def test_positive_answer(self):
        assert verbalize_signed(40000) == "よんまん"


class TestVerbalizeNumbers:
    def test_replaces_digit_runs(self):
        assert verbalize_numbers("1000円と3000円") == "いっせん円とさんぜん円"

    def test_comma_grouped(self):
        assert verbalize_numbers("1,000,000円") == "ひゃくまん円"

    def test_text_without_digits_unchanged(self):
        assert verbalize_numbers("ねがいましては") == "ねがいましては"
