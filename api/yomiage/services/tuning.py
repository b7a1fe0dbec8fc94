"""Synthesis parameter tuning for easily misheard numerals.

Geminated readings (はっせん, いっちょう) and よんまん are often confused with
their neighbours, so phrases containing them are read slower, with stronger
intonation, longer pauses around the risky phrase and a stretched vowel on
the mora after the geminate.
"""

import copy
from dataclasses import dataclass, field, replace

SPEED_MIN = 0.5
SPEED_MAX = 2.0
INTONATION_MIN = 0.5
INTONATION_MAX = 2.0

DURATION_MIN_S = 3.0
DURATION_MAX_S = 30.0

DEFAULT_SPEED_MULTIPLIER = 0.95
DEFAULT_INTONATION_MULTIPLIER = 1.1

SOKUON = "ッ"


@dataclass(frozen=True)
class SynthesisParameters:
    speed_scale: float = 1.0
    intonation_scale: float = 1.0
    pause_floor: float = 0.0
    vowel_multiplier: float = 1.0
    vowel_moras: frozenset[str] = field(default_factory=frozenset)
    after_sokuon: bool = False
    risky_patterns: tuple[str, ...] = ()
    # 0 on the default path, otherwise the highest-risk tier matched (1 = worst)
    tier: int = 0


@dataclass(frozen=True)
class TuningRule:
    pattern: str
    tier: int
    speed_multiplier: float
    intonation_multiplier: float
    pause_floor: float
    vowel_multiplier: float
    vowel_moras: tuple[str, ...] = ()
    after_sokuon: bool = False


TUNING_RULES = (
    TuningRule("はっ", 1, 0.85, 1.4, 0.15, 1.2, after_sokuon=True),
    TuningRule("いっ", 1, 0.85, 1.4, 0.15, 1.2, after_sokuon=True),
    TuningRule("はち", 1, 0.85, 1.4, 0.15, 1.2, vowel_moras=("チ",)),
    TuningRule("よんまん", 2, 0.9, 1.3, 0.15, 1.1, vowel_moras=("ヨ",)),
)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def to_katakana(text: str) -> str:
    return "".join(
        chr(ord(c) + 0x60) if "ぁ" <= c <= "ゖ" else c for c in text
    )


def speed_for_duration(duration_s: float, reference_s: float = 10.0) -> float:
    """Map a total-duration hint (3-30 s) to a VOICEVOX speed scale.

    ``reference_s`` is the duration read at speed 1.0; shorter hints speed
    up, longer ones slow down.
    """
    duration = _clamp(duration_s, DURATION_MIN_S, DURATION_MAX_S)
    return _clamp(reference_s / duration, SPEED_MIN, SPEED_MAX)


def base_parameters(
    duration_s: float | None = None, reference_s: float = 10.0
) -> SynthesisParameters:
    if duration_s is None:
        return SynthesisParameters()
    return SynthesisParameters(speed_scale=speed_for_duration(duration_s, reference_s))


def matching_rules(text: str, rules=TUNING_RULES) -> list[TuningRule]:
    return [rule for rule in rules if rule.pattern in text]


def tune(
    text: str, base: SynthesisParameters, rules=TUNING_RULES
) -> SynthesisParameters:
    """Adjust ``base`` for the risky substrings found in ``text``.

    When several rules match, each field takes the most conservative value
    among them.
    """
    matched = matching_rules(text, rules)
    if not matched:
        return replace(
            base,
            speed_scale=base.speed_scale * DEFAULT_SPEED_MULTIPLIER,
            intonation_scale=_clamp(
                base.intonation_scale * DEFAULT_INTONATION_MULTIPLIER,
                INTONATION_MIN,
                INTONATION_MAX,
            ),
        )

    speed = min(r.speed_multiplier for r in matched)
    intonation = max(r.intonation_multiplier for r in matched)
    vowel = max(r.vowel_multiplier for r in matched)
    moras = set(base.vowel_moras)
    for rule in matched:
        moras.update(rule.vowel_moras)

    return SynthesisParameters(
        speed_scale=base.speed_scale * speed,
        intonation_scale=_clamp(
            base.intonation_scale * intonation, INTONATION_MIN, INTONATION_MAX
        ),
        pause_floor=max([base.pause_floor] + [r.pause_floor for r in matched]),
        vowel_multiplier=base.vowel_multiplier * vowel,
        vowel_moras=frozenset(moras),
        after_sokuon=base.after_sokuon or any(r.after_sokuon for r in matched),
        risky_patterns=tuple(r.pattern for r in matched),
        tier=min(r.tier for r in matched),
    )


def _pause_mora(length: float) -> dict:
    return {
        "text": "、",
        "consonant": None,
        "consonant_length": None,
        "vowel": "pau",
        "vowel_length": length,
        "pitch": 0.0,
    }


def _phrase_kana(phrase: dict) -> str:
    return "".join(m.get("text", "") for m in phrase.get("moras", []))


def apply_to_query(query: dict, params: SynthesisParameters) -> dict:
    """Merge tuned parameters into a VOICEVOX audio query (returns a copy)."""
    query = copy.deepcopy(query)
    query["speedScale"] = params.speed_scale
    query["intonationScale"] = params.intonation_scale

    phrases = query.get("accent_phrases") or []

    if params.pause_floor > 0 and params.risky_patterns:
        risky = [to_katakana(p) for p in params.risky_patterns]
        boundaries = set()
        for i, phrase in enumerate(phrases):
            if any(p in _phrase_kana(phrase) for p in risky):
                boundaries.update((i - 1, i))
        # No pause after the final phrase
        for i in sorted(b for b in boundaries if 0 <= b < len(phrases) - 1):
            pause = phrases[i].get("pause_mora")
            if pause is None:
                phrases[i]["pause_mora"] = _pause_mora(params.pause_floor)
            else:
                pause["vowel_length"] = max(
                    pause.get("vowel_length") or 0.0, params.pause_floor
                )

    if params.vowel_multiplier != 1.0:
        for phrase in phrases:
            previous = None
            for mora in phrase.get("moras", []):
                text = mora.get("text")
                targeted = text in params.vowel_moras or (
                    params.after_sokuon and previous == SOKUON
                )
                if targeted and isinstance(mora.get("vowel_length"), (int, float)):
                    mora["vowel_length"] *= params.vowel_multiplier
                previous = text

    return query
