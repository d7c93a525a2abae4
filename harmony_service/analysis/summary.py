"""
Harmony summary generation.

Deterministic templating over the overall score tier and the strongest and
weakest metrics. Same inputs always produce the same text.
"""

from typing import Optional, Sequence, Tuple

from .metrics import metric_label
from .models import Metric

# (inclusive lower bound, tier name), highest first
TIERS: Tuple[Tuple[float, str], ...] = (
    (85.0, 'exceptional'),
    (70.0, 'above average'),
    (55.0, 'average'),
    (40.0, 'below average'),
    (0.0, 'needs improvement'),
)


def score_tier(score: float) -> str:
    for lower_bound, tier in TIERS:
        if score >= lower_bound:
            return tier
    return TIERS[-1][1]


def highlights(metrics: Sequence[Metric]) -> Tuple[Optional[Metric], Optional[Metric]]:
    """
    Return (strongest, weakest) metric.

    Ties go to the metric declared first.
    """
    if not metrics:
        return None, None

    strongest = metrics[0]
    weakest = metrics[0]
    for metric in metrics[1:]:
        if metric.score > strongest.score:
            strongest = metric
        if metric.score < weakest.score:
            weakest = metric
    return strongest, weakest


def generate_summary(overall_score: float, metrics: Sequence[Metric], gender: str) -> str:
    tier = score_tier(overall_score)
    text = (
        f'Overall facial harmony is {tier} ({overall_score:.1f}/100) '
        f'against the {gender} reference ranges.'
    )

    strongest, weakest = highlights(metrics)
    if strongest is None:
        return text

    if strongest.score == weakest.score:
        return f'{text} All measured proportions score evenly ({strongest.score:.0f}/100).'

    return (
        f'{text} Strongest feature: {metric_label(strongest.id)} '
        f'({strongest.score:.0f}/100). '
        f'Most room for improvement: {metric_label(weakest.id)} '
        f'({weakest.score:.0f}/100).'
    )
