"""Stage 4: Script Assembly.

Picks the strongest hook and statistic, lays out the five-part timing
template scaled to the requested duration and the tone's speaking rate,
and asks the model for the final script at high temperature.  The
answer is plain text; only emptiness is rejected.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..gateway import ModelGateway
from ..models import Hook, InsightBundle, Language, StatisticItem
from ..selection import select_best
from ..timing import timed_stage
from ..tones import policy_for

log = logging.getLogger(__name__)

_PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"
_SYSTEM_PROMPT = (_PROMPTS_DIR / "script_system.txt").read_text(encoding="utf-8").strip()
_USER_TEMPLATE = (_PROMPTS_DIR / "script_user.txt").read_text(encoding="utf-8").strip()

MAX_TOKENS = 1200
TEMPERATURE = 0.8

# Lower bound of each word-count range, as a share of the upper bound.
_WORD_RANGE_FLOOR = 0.85

_LANGUAGE_NAMES = {Language.AR: "العربية", Language.EN: "الإنجليزية"}


class ScriptAssemblyError(Exception):
    """The model returned an empty script."""


@dataclass(frozen=True)
class ScriptPart:
    title: str
    seconds: float  # share of a 60-second script
    guidance: tuple[str, ...]


SCRIPT_STRUCTURE: tuple[ScriptPart, ...] = (
    ScriptPart("الخطاف القوي", 8, (
        "استخدم الخطاف المختار أو طور نسخة محسنة منه",
        "اجعله صادماً ومثيراً للفضول في أول 3 ثوانٍ",
        "استخدم رقم أو إحصائية مؤثرة",
    )),
    ScriptPart("تحديد المشكلة", 12, (
        "استخدم نقاط الألم المحددة من التحليل",
        "اجعل المشاهد يشعر بالمشكلة شخصياً",
        "اربط المشكلة بالواقع اليومي",
    )),
    ScriptPart("تقديم الحل والمحتوى الرئيسي", 25, (
        "قدم الحل بطريقة واضحة ومثيرة",
        "استخدم مثال من أمثلة النجاح المتاحة",
        "أضف تفاصيل عملية قابلة للتطبيق فوراً",
    )),
    ScriptPart("الدليل والإثبات", 10, (
        "استخدم الإحصائية الأقوى من المتاحة",
        "أضف مثال نجاح محدد وملموس",
        "استخدم أرقام دقيقة ومؤثرة",
    )),
    ScriptPart("دعوة قوية للعمل", 5, (
        "دعوة محددة وواضحة للتفاعل",
        "أضف عنصر الإلحاح أو الحصرية",
        "استخدم فعل أمر قوي ومحفز",
    )),
)


def word_targets(seconds: float, speaking_rate: float) -> tuple[int, int]:
    """(low, high) word counts for a part lasting *seconds* at *speaking_rate* words/s."""
    high = max(1, round(seconds * speaking_rate))
    low = max(1, math.floor(high * _WORD_RANGE_FLOOR))
    return low, high


def build_structure(duration: int, speaking_rate: float) -> str:
    """Render the five-part template with timings scaled to *duration*."""
    scale = duration / 60
    blocks = []
    for i, part in enumerate(SCRIPT_STRUCTURE, 1):
        seconds = part.seconds * scale
        low, high = word_targets(seconds, speaking_rate)
        lines = [f"{i}. {part.title} ({seconds:g} ثانية - {low}-{high} كلمة):"]
        lines.extend(f"   - {g}" for g in part.guidance)
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def build_prompt(
    topic: str,
    key_points: Optional[str],
    insights: InsightBundle,
    best_hook: Hook,
    best_statistic: StatisticItem,
    tone: str,
    duration: int,
    language: Language = Language.AR,
) -> str:
    policy = policy_for(tone)
    return _USER_TEMPLATE.format(
        topic=topic,
        key_points=key_points or "غير محدد",
        duration=duration,
        tone=tone,
        language=_LANGUAGE_NAMES[Language(language)],
        hook=best_hook.text,
        statistic=best_statistic.full_text,
        pain_points=json.dumps(insights.pain_points, ensure_ascii=False),
        solutions=json.dumps(insights.solutions, ensure_ascii=False),
        success_examples=json.dumps(insights.success_examples, ensure_ascii=False),
        power_words=json.dumps(insights.power_words, ensure_ascii=False),
        structure=build_structure(duration, policy.speaking_rate),
        tone_instructions=policy.instructions,
    )


@timed_stage("script_assembly", "ai")
async def assemble_script(
    gateway: ModelGateway,
    model_name: str,
    topic: str,
    key_points: Optional[str],
    insights: InsightBundle,
    hooks: list[Hook],
    statistics: list[StatisticItem],
    tone: str,
    duration: int,
    language: Language = Language.AR,
) -> str:
    best_hook = select_best(hooks, "impact_score")
    best_statistic = select_best(statistics, "impact_level")
    log.info("Assembling script with hook impact=%d, statistic impact=%d",
             best_hook.impact_score, best_statistic.impact_level)

    prompt = build_prompt(topic, key_points, insights, best_hook, best_statistic,
                          tone, duration, language)
    script = (await gateway.complete(
        _SYSTEM_PROMPT, prompt, model_name, MAX_TOKENS, TEMPERATURE
    )).strip()
    if not script:
        raise ScriptAssemblyError("Model returned an empty script")
    return script
