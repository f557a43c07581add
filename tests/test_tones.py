from script_generator.models import Tone
from script_generator.tones import TONE_POLICIES, policy_for, suggest_tones


def test_every_tone_has_a_policy():
    assert set(TONE_POLICIES) == set(Tone)
    for tone, policy in TONE_POLICIES.items():
        assert policy.tone is tone
        assert policy.speaking_rate > 0
        assert policy.mock_prefix


def test_speaking_rates():
    assert policy_for("enthusiastic").speaking_rate == 3.0
    assert policy_for("comedy").speaking_rate == 2.8
    assert policy_for(Tone.EDUCATIONAL).speaking_rate == 2.7
    assert policy_for("storytelling").speaking_rate == 2.3
    assert policy_for("professional").speaking_rate == 2.5


def test_suggestions_follow_keywords():
    assert suggest_tones("كيف تتعلم البرمجة") == ["educational"]
    assert suggest_tones("قصة نجاح في عالم المال") == ["enthusiastic", "storytelling", "professional"]
    assert suggest_tones("نكت مضحكة عن القطط") == ["comedy"]


def test_suggestion_defaults_to_educational():
    assert suggest_tones("الطقس") == ["educational"]
