"""Scoring engine — turns check records into category and global scores.

Bonus checks add to a category's achieved weight without raising its ceiling,
so a category can overflow before being capped at 100%. A category with only
bonus checks has no ceiling at all and scores 0%.
"""

from __future__ import annotations

import logging
import math
from typing import Mapping, Optional, Sequence

from .models import AuditResult, Category, CategoryScore, CheckRecord, Grade

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY_WEIGHTS: dict[Category, int] = {
    Category.PROFILE: 150,
    Category.REPOSITORY: 300,
    Category.COMMUNITY: 200,
    Category.SECURITY: 150,
    Category.ACTIVITY: 200,
}

RED_FLAG_PENALTY = 5

GRADE_THRESHOLDS = [
    (90, Grade.A),
    (80, Grade.B),
    (60, Grade.C),
    (40, Grade.D),
]


def round_half_up(value: float) -> int:
    """Round .5 up instead of to the nearest even integer."""
    return int(math.floor(value + 0.5))


def grade_for(score: float) -> Grade:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return Grade.F


def _capped_percentage(total: float, maximum: float) -> float:
    if maximum <= 0:
        return 0.0
    return min(100.0, total / maximum * 100)


def score_categories(
    checks: Sequence[CheckRecord],
    categories: Sequence[Category] = (),
) -> dict[Category, CategoryScore]:
    """Sum check weights per category.

    ``categories`` are always present in the result, even without checks.
    """
    sums: dict[Category, list[float]] = {cat: [0.0, 0.0] for cat in categories}
    for check in checks:
        bucket = sums.setdefault(check.category, [0.0, 0.0])
        if not check.is_bonus:
            bucket[1] += check.weight
        if check.passed:
            bucket[0] += check.weight

    return {
        cat: CategoryScore(
            total=total,
            max=maximum,
            percentage=round_half_up(_capped_percentage(total, maximum)),
        )
        for cat, (total, maximum) in sums.items()
    }


def evaluate(
    checks: Sequence[CheckRecord],
    red_flags: Sequence[str],
    weights: Optional[Mapping[Category, float]] = None,
) -> AuditResult:
    """Compute the final audit result.

    The global score is the weighted mean of the capped (unrounded) category
    percentages, minus a fixed penalty per red flag, floored at 0. Categories
    missing from ``weights`` are reported but do not count towards the mean.
    """
    weights = DEFAULT_CATEGORY_WEIGHTS if weights is None else weights
    scores = score_categories(checks, list(weights))

    weighted_sum = 0.0
    weight_total = 0.0
    for cat, weight in weights.items():
        score = scores[cat]
        weighted_sum += _capped_percentage(score.total, score.max) * weight
        weight_total += weight

    global_score = round_half_up(weighted_sum / weight_total) if weight_total > 0 else 0
    global_score -= RED_FLAG_PENALTY * len(red_flags)
    global_score = max(0, global_score)

    logger.info(
        "Scored %d checks across %d categories: %d/100 (%d red flags)",
        len(checks), len(scores), global_score, len(red_flags),
    )

    return AuditResult(
        categories={cat: s.percentage for cat, s in scores.items()},
        category_scores=scores,
        global_score=global_score,
        grade=grade_for(global_score),
        checks=list(checks),
        red_flags=list(red_flags),
    )
