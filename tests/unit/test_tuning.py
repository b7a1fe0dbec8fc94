"""Tests for the speech parameter tuner and VOICEVOX query merging."""

import pytest

from yomiage.services.tuning import (
    DEFAULT_INTONATION_MULTIPLIER,
    DEFAULT_SPEED_MULTIPLIER,
    TUNING_RULES,
    SynthesisParameters,
    TuningRule,
    apply_to_query,
    base_parameters,
    speed_for_duration,
    to_katakana,
    tune,
)

BASE = SynthesisParameters()


def _mora(text, vowel_length=0.1):
    return {
        "text": text,
        "consonant": None,
        "consonant_length": None,
        "vowel": "a",
        "vowel_length": vowel_length,
        "pitch": 5.0,
    }


def _phrase(*texts, pause=None):
    return {
        "moras": [_mora(t) for t in texts],
        "accent": 1,
        "pause_mora": pause,
        "is_interrogative": False,
    }


def _query(*phrases):
    return {
        "accent_phrases": list(phrases),
        "speedScale": 1.0,
        "intonationScale": 1.0,
        "pitchScale": 0.0,
        "volumeScale": 1.0,
    }


class TestTune:
    def test_default_path(self):
        params = tune("にせんえんなり", BASE)
        assert params.speed_scale == pytest.approx(DEFAULT_SPEED_MULTIPLIER)
        assert params.intonation_scale == pytest.approx(DEFAULT_INTONATION_MULTIPLIER)
        assert params.tier == 0
        assert params.risky_patterns == ()

    @pytest.mark.parametrize("text", ["はっせん", "いっちょう", "はちおく", "よんまん"])
    def test_risky_text_is_slower(self, text):
        default = tune("にせん", BASE)
        params = tune(text, BASE)
        assert params.speed_scale < default.speed_scale
        assert 0.5 <= params.intonation_scale <= 2.0
        assert params.pause_floor > 0
        assert params.tier >= 1

    def test_highest_risk_tier_is_most_aggressive(self):
        tier1 = tune("はっせん", BASE)
        tier2 = tune("よんまん", BASE)
        assert tier1.speed_scale < tier2.speed_scale
        assert tier1.tier == 1
        assert tier2.tier == 2

    def test_multiple_matches_take_most_conservative(self):
        params = tune("よんまんはっせん", BASE)
        assert params.speed_scale == pytest.approx(0.85)
        assert params.intonation_scale == pytest.approx(1.4)
        assert params.vowel_multiplier == pytest.approx(1.2)
        assert params.vowel_moras == frozenset({"ヨ"})
        assert params.after_sokuon
        assert set(params.risky_patterns) == {"はっ", "よんまん"}
        assert params.tier == 1

    def test_intonation_clamped(self):
        high = tune("はっせん", SynthesisParameters(intonation_scale=1.9))
        assert high.intonation_scale == 2.0
        low = tune("にせん", SynthesisParameters(intonation_scale=0.1))
        assert low.intonation_scale == 0.5

    def test_scales_relative_to_base(self):
        params = tune("はっせん", SynthesisParameters(speed_scale=2.0))
        assert params.speed_scale == pytest.approx(1.7)

    def test_custom_rule_table(self):
        rules = (TuningRule("ななまん", 1, 0.5, 1.0, 0.3, 1.0),)
        params = tune("ななまん", BASE, rules=rules)
        assert params.speed_scale == pytest.approx(0.5)
        assert params.pause_floor == pytest.approx(0.3)
        # built-in rules are not consulted
        assert tune("はっせん", BASE, rules=rules).tier == 0

    def test_rule_table_patterns_are_hiragana(self):
        for rule in TUNING_RULES:
            assert all("ぁ" <= c <= "ゖ" for c in rule.pattern)

    def test_pure(self):
        assert tune("はっせん", BASE) == tune("はっせん", BASE)


class TestDuration:
    def test_reference_duration_is_normal_speed(self):
        assert speed_for_duration(10.0) == pytest.approx(1.0)

    def test_short_is_faster(self):
        assert speed_for_duration(5.0) == pytest.approx(2.0)
        assert speed_for_duration(3.0) == 2.0

    def test_long_is_slower_and_clamped(self):
        assert speed_for_duration(20.0) == pytest.approx(0.5)
        assert speed_for_duration(60.0) == 0.5

    def test_out_of_range_hint_clamped(self):
        assert speed_for_duration(1.0) == speed_for_duration(3.0)

    def test_base_parameters(self):
        assert base_parameters() == SynthesisParameters()
        assert base_parameters(20.0, reference_s=15.0).speed_scale == pytest.approx(0.75)


class TestApplyToQuery:
    def test_scales_set(self):
        params = tune("にせん", BASE)
        merged = apply_to_query(_query(_phrase("ニ", "セ", "ン")), params)
        assert merged["speedScale"] == pytest.approx(params.speed_scale)
        assert merged["intonationScale"] == pytest.approx(params.intonation_scale)

    def test_input_query_untouched(self):
        query = _query(_phrase("ハ", "ッ", "セ", "ン"))
        apply_to_query(query, tune("はっせん", BASE))
        assert query["speedScale"] == 1.0
        assert query["accent_phrases"][0]["moras"][2]["vowel_length"] == 0.1

    def test_vowel_after_sokuon_extended(self):
        merged = apply_to_query(
            _query(_phrase("ハ", "ッ", "セ", "ン")), tune("はっせん", BASE)
        )
        moras = merged["accent_phrases"][0]["moras"]
        assert moras[2]["vowel_length"] == pytest.approx(0.12)
        assert moras[0]["vowel_length"] == pytest.approx(0.1)

    def test_target_mora_extended(self):
        merged = apply_to_query(
            _query(_phrase("ハ", "チ", "オ", "ク")), tune("はちおく", BASE)
        )
        moras = merged["accent_phrases"][0]["moras"]
        assert moras[1]["vowel_length"] == pytest.approx(0.12)
        assert moras[2]["vowel_length"] == pytest.approx(0.1)

    def test_pause_inserted_around_risky_phrase(self):
        query = _query(
            _phrase("ネ", "ガ", "イ"),
            _phrase("ハ", "ッ", "セ", "ン"),
            _phrase("エ", "ン"),
        )
        merged = apply_to_query(query, tune("はっせん", BASE))
        phrases = merged["accent_phrases"]
        assert phrases[0]["pause_mora"]["vowel_length"] == pytest.approx(0.15)
        assert phrases[1]["pause_mora"]["vowel_length"] == pytest.approx(0.15)
        assert phrases[2]["pause_mora"] is None

    def test_existing_pause_raised_not_shortened(self):
        short = _mora("、", 0.05)
        long = _mora("、", 0.4)
        query = _query(
            _phrase("ヨ", "ン", "マ", "ン", pause=short),
            _phrase("ニ", pause=long),
            _phrase("エ", "ン"),
        )
        merged = apply_to_query(query, tune("よんまん", BASE))
        phrases = merged["accent_phrases"]
        assert phrases[0]["pause_mora"]["vowel_length"] == pytest.approx(0.15)
        assert phrases[1]["pause_mora"]["vowel_length"] == pytest.approx(0.4)

    def test_default_path_leaves_moras(self):
        query = _query(_phrase("ニ", "セ", "ン"), _phrase("エ", "ン"))
        merged = apply_to_query(query, tune("にせん", BASE))
        assert merged["accent_phrases"] == query["accent_phrases"]


def test_to_katakana():
    assert to_katakana("はっせん、えんなり") == "ハッセン、エンナリ"
