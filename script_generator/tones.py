"""Tone policy table.

Every stage that varies by tone reads from ``TONE_POLICIES`` instead of
branching on the tone name itself.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .models import Tone


@dataclass(frozen=True)
class TonePolicy:
    tone: Tone
    # Enhanced pipeline (hook and script assembly prompts).
    instructions: str
    # Words per second used for duration estimates and word-count targets.
    speaking_rate: float
    # Heuristic scoring; an empty set means the tone earns no bonus.
    quality_keywords: tuple[str, ...]
    engagement_markers: tuple[str, ...]
    # Basic single-call prompt.
    description: str
    hook_instructions: str
    voice_characteristics: str
    system_line: str
    # Fallback generator.
    mock_prefix: str
    # Topic -> tone suggestion.
    suggestion_pattern: re.Pattern


TONE_POLICIES: dict[Tone, TonePolicy] = {
    Tone.ENTHUSIASTIC: TonePolicy(
        tone=Tone.ENTHUSIASTIC,
        instructions=(
            "- استخدم كلمات الطاقة: 'مذهل، رائع، لا يُصدق، ثوري، خارق'\n"
            "- أضف رموز تعبيرية مناسبة: 🔥⚡💥🚀\n"
            "- اجعل الجمل قصيرة ومتفجرة\n"
            "- استخدم التعجب بكثرة\n"
            "- أضف عنصر الإثارة والتشويق\n"
            "- اجعل كل جملة تبني على الطاقة السابقة"
        ),
        speaking_rate=3.0,
        quality_keywords=("رائع", "مذهل", "ممتاز", "إبداع", "قوي"),
        engagement_markers=(),
        description="حماسية ومتحمسة مع طاقة إيجابية عالية",
        hook_instructions="   - سؤال مثير أو إحصائية مفاجئة أو تصريح جريء",
        voice_characteristics=(
            "\n- صوت حماسي وطاقة عالية"
            "\n- سرعة متوسطة مع تأكيد على الكلمات المهمة"
            "\n- تعبيرات وجه متفائلة ونظرات مباشرة للكاميرا"
            "\n- حركات يد تدعم الكلام"
        ),
        system_line="اكتب بنبرة حماسية ومتحمسة، استخدم كلمات تحفيزية وطاقة إيجابية عالية.",
        mock_prefix="🔥 هل تريد أن تكتشف السر المذهل وراء",
        suggestion_pattern=re.compile(r"(نجاح|تحفيز|إنجاز|هدف)"),
    ),
    Tone.COMEDY: TonePolicy(
        tone=Tone.COMEDY,
        instructions=(
            "- استخدم مقارنات مضحكة ومألوفة\n"
            "- أضف مواقف طريفة يمر بها الجميع\n"
            "- استخدم السخرية اللطيفة من المشاكل الشائعة\n"
            "- اجعل اللهجة خفيفة ومرحة\n"
            "- أضف تشبيهات مضحكة ومبتكرة\n"
            "- استخدم الكوميديا لتبسيط المفاهيم المعقدة"
        ),
        speaking_rate=2.8,
        quality_keywords=(),
        engagement_markers=("😂", "😄", "🤣", "هههه", "ضحك"),
        description="كوميدية مرحة مع لمسة من الفكاهة المناسبة",
        hook_instructions="   - موقف طريف أو مقارنة مضحكة أو سؤال ساخر",
        voice_characteristics=(
            "\n- صوت مرح وطاقة لعوبة"
            "\n- تنويع في السرعة والنبرة للتأثير الكوميدي"
            "\n- تعبيرات وجه متنوعة وحركات سريعة"
            "\n- أسلوب تمثيلي خفيف"
        ),
        system_line="اكتب بنبرة كوميدية مرحة، استخدم الفكاهة المناسبة والتشبيهات الطريفة.",
        mock_prefix="😄 تخيل لو قلت لك أن هناك طريقة مضحكة لفهم",
        suggestion_pattern=re.compile(r"(مضحك|طريف|فكاهة|نكت)"),
    ),
    Tone.EDUCATIONAL: TonePolicy(
        tone=Tone.EDUCATIONAL,
        instructions=(
            "- استخدم هيكل منطقي: 'أولاً، ثانياً، وأخيراً'\n"
            "- أضف أمثلة واضحة ومفهومة\n"
            "- اجعل التعريفات بسيطة ومباشرة\n"
            "- استخدم أسلوب الأستاذ الودود\n"
            "- أضف نصائح عملية قابلة للتطبيق\n"
            "- اجعل كل نقطة تبني على السابقة منطقياً"
        ),
        speaking_rate=2.7,
        quality_keywords=("تعلم", "اكتشف", "فهم", "معرفة", "خطوات"),
        engagement_markers=(),
        description="تعليمية واضحة مع تبسيط المعلومات",
        hook_instructions='   - سؤال يثير الفضول أو "هل تعلم أن..." أو "ماذا لو..."',
        voice_characteristics=(
            "\n- صوت واضح ومنظم مثل المدرس"
            "\n- سرعة متوسطة مع وقفات استراتيجية"
            "\n- تعبيرات وجه هادئة وثقة"
            "\n- حركات يد توضيحية بسيطة"
        ),
        system_line="اكتب بنبرة تعليمية واضحة، ركز على تبسيط المعلومات وجعلها سهلة الفهم.",
        mock_prefix="📚 دعني أعلمك أهم ما تحتاج معرفته عن",
        suggestion_pattern=re.compile(r"(تعلم|كيف|طريقة|خطوات|دليل)"),
    ),
    Tone.STORYTELLING: TonePolicy(
        tone=Tone.STORYTELLING,
        instructions=(
            "- ابدأ بـ 'دعني أحكي لك قصة...'\n"
            "- أضف شخصيات واضحة ومحددة\n"
            "- اخلق صراع أو تحدي مثير\n"
            "- استخدم تفاصيل حسية وعاطفية\n"
            "- اجعل القصة تتطور بشكل طبيعي\n"
            "- اختتم بدرس مستفاد قوي ومؤثر"
        ),
        speaking_rate=2.3,
        quality_keywords=(),
        engagement_markers=("كان", "حدث", "قصة", "يحكى"),
        description="قصصية شيقة مع عناصر التشويق والسرد",
        hook_instructions='   - بداية قصة مشوقة أو موقف شخصي أو "كان هناك..."',
        voice_characteristics=(
            "\n- صوت هادئ وجذاب"
            "\n- تنويع في النبرة لخلق التشويق"
            "\n- تعبيرات وجه تعكس أحداث القصة"
            "\n- حركات طبيعية تدعم السرد"
        ),
        system_line="اكتب بنبرة قصصية شيقة، استخدم تقنيات السرد والتشويق.",
        mock_prefix="✨ دعني أحكي لك قصة مذهلة عن",
        suggestion_pattern=re.compile(r"(قصة|حكاية|تجربة|رحلة)"),
    ),
    Tone.PROFESSIONAL: TonePolicy(
        tone=Tone.PROFESSIONAL,
        instructions=(
            "- استخدم مصطلحات تقنية دقيقة\n"
            "- أضف أرقام وإحصائيات محددة\n"
            "- اجعل الأسلوب موضوعي ومباشر\n"
            "- استخدم مراجع وأدلة علمية\n"
            "- أضف تحليل عميق ومدروس\n"
            "- اجعل كل ادعاء مدعوم بدليل قوي"
        ),
        speaking_rate=2.5,
        quality_keywords=(),
        engagement_markers=(),
        description="مهنية وموثوقة مع معلومات دقيقة",
        hook_instructions="   - إحصائية مهمة أو حقيقة صادمة أو سؤال استراتيجي",
        voice_characteristics=(
            "\n- صوت موثوق ومهني"
            "\n- سرعة ثابتة ووضوح في النطق"
            "\n- تعبيرات وجه جدية وواثقة"
            "\n- حركات محدودة ومدروسة"
        ),
        system_line="اكتب بنبرة مهنية وموثوقة، استخدم لغة رسمية ومعلومات دقيقة.",
        mock_prefix="💼 الدراسات الحديثة تؤكد أهمية فهم",
        suggestion_pattern=re.compile(r"(عمل|شركة|استثمار|مال)"),
    ),
}

# Order in which suggestions are reported.
_SUGGESTION_ORDER = (
    Tone.EDUCATIONAL,
    Tone.COMEDY,
    Tone.ENTHUSIASTIC,
    Tone.STORYTELLING,
    Tone.PROFESSIONAL,
)


def policy_for(tone: Tone | str) -> TonePolicy:
    return TONE_POLICIES[Tone(tone)]


def suggest_tones(topic: str) -> list[str]:
    """Return the tones whose keyword pattern matches *topic*.

    Falls back to ``["educational"]`` when nothing matches.
    """
    suggestions = [
        tone.value for tone in _SUGGESTION_ORDER
        if TONE_POLICIES[tone].suggestion_pattern.search(topic)
    ]
    return suggestions or [Tone.EDUCATIONAL.value]
