import pytest

from script_generator import scoring


def test_word_count_counts_arabic_words():
    assert scoring.word_count("مرحبا بكم في القناة") == 4
    assert scoring.word_count("  ") == 0


def test_estimate_duration_rounds_up():
    assert scoring.estimate_duration(27, 2.7) == 10
    assert scoring.estimate_duration(28, 2.7) == 11
    assert scoring.estimate_duration(0, 2.7) == 0


def test_plain_script_gets_base_scores():
    assert scoring.quality_score("نص عادي", "professional") == 70
    assert scoring.engagement_score("نص عادي", "professional") == 60


def test_quality_bonuses_clamp_to_100():
    script = "هل تعلم هذا السر؟ " + "تعلم " * 160 + "شارك الفيديو"
    assert 150 <= scoring.word_count(script) <= 300
    # 70 + opening + call to action + length + tone keyword = 105
    assert scoring.quality_score(script, "educational") == 100


def test_quality_ignores_length_outside_optimal_range():
    script = "هل تعلم؟ شارك"
    assert scoring.quality_score(script, "comedy") == 90


def test_engagement_bonuses():
    assert scoring.engagement_score("هل تعلم؟", "educational") == 75


def test_engagement_clamps_to_100():
    script = "مذهل رائع لا تصدق سر اكتشف تخيل؟ 5 🔥"
    assert scoring.engagement_score(script, "enthusiastic") == 100


def test_engagement_level_thresholds():
    assert scoring.engagement_level(80) == "high"
    assert scoring.engagement_level(79.9) == "medium"
    assert scoring.engagement_level(60) == "medium"
    assert scoring.engagement_level(59) == "low"


TONE_WORDS = "نص فيه رائع وتعلم وتخيل وقصة ودراسة"
TONE_MARKERS = "نص عادي! هههه كان % الأرقام 🔥 هل تعلم"


@pytest.mark.parametrize("tone, expected", [
    ("enthusiastic", 75),
    ("educational", 75),
    ("comedy", 70),
    ("storytelling", 70),
    ("professional", 70),
])
def test_quality_tone_bonus_per_tone(tone, expected):
    assert scoring.quality_score(TONE_WORDS, tone) == expected


@pytest.mark.parametrize("tone, expected", [
    ("enthusiastic", 60),
    ("educational", 60),
    ("comedy", 70),
    ("storytelling", 70),
    ("professional", 60),
])
def test_engagement_tone_bonus_per_tone(tone, expected):
    assert scoring.engagement_score(TONE_MARKERS, tone) == expected


def test_common_punctuation_earns_no_tone_bonus():
    assert scoring.engagement_score("نص عادي!", "enthusiastic") == 60
    assert scoring.engagement_score("نص عادي %", "professional") == 60
    assert scoring.quality_score("نص تخيل", "comedy") == 70
