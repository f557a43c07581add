"""Best-item selection for hooks and statistics."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from .models import Hook, StatisticItem

PLACEHOLDER_HOOK = Hook(text="هل تريد معرفة السر؟", type="question", impact_score=7)
PLACEHOLDER_STATISTIC = StatisticItem(full_text="الدراسات تؤكد فعالية هذه الطريقة")

_PLACEHOLDERS = {
    "impact_score": PLACEHOLDER_HOOK,
    "impact_level": PLACEHOLDER_STATISTIC,
}


def _score(item: Any, field: str) -> float:
    value = item.get(field) if isinstance(item, dict) else getattr(item, field, None)
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def select_best(items: Sequence[Any], score_field: str, placeholder: Optional[Any] = None) -> Any:
    """Return the item with the highest *score_field*.

    Ties go to the earliest item (``sorted`` is stable, also with
    ``reverse=True``).  An empty *items* yields the placeholder registered
    for *score_field*, or *placeholder* when given.
    """
    if not items:
        if placeholder is not None:
            return placeholder
        return _PLACEHOLDERS.get(score_field, PLACEHOLDER_HOOK).model_copy()
    ranked = sorted(items, key=lambda item: _score(item, score_field), reverse=True)
    return ranked[0]
