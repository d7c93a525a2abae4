"""
Scoring engine module.

Maps raw metric values to 0-100 scores against the reference tables and
aggregates them into one overall score.

Per-metric falloff:
- 100 at the ideal value, or anywhere inside an ideal range
- outside, score = 100 * 0.9 ** ((deviation / tolerance) ** 2), so a
  deviation within the tolerance band keeps the score >= 90 and the score
  decays monotonically toward 0 beyond it
"""

import math
from dataclasses import replace
from typing import Dict, Sequence, Tuple

from ..errors import DegenerateGeometryError
from ..logging_config import get_logger
from .models import Metric
from .reference import ReferenceEntry, ReferenceTables

logger = get_logger(__name__)

FALLOFF_AT_TOLERANCE = 0.9


def deviation(raw_value: float, entry: ReferenceEntry) -> float:
    """Distance from raw_value to the ideal value or nearest range bound."""
    low, high = entry.bounds
    if raw_value < low:
        return low - raw_value
    if raw_value > high:
        return raw_value - high
    return 0.0


def score_value(raw_value: float, entry: ReferenceEntry) -> float:
    """
    Score one raw value against its reference entry.

    Returns:
        Score clamped to [0, 100]
    """
    if not math.isfinite(raw_value):
        return 0.0

    d = deviation(raw_value, entry)
    if d == 0.0:
        return 100.0

    score = 100.0 * FALLOFF_AT_TOLERANCE ** ((d / entry.tolerance) ** 2)
    return min(100.0, max(0.0, score))


def score_metrics(
    metrics: Sequence[Metric],
    gender: str,
    tables: ReferenceTables
) -> Tuple[Metric, ...]:
    """
    Fill in the score of every metric.

    Raises:
        UnknownMetricError: A metric has no entry for this gender
    """
    scored = []
    for metric in metrics:
        entry = tables.lookup(metric.id, gender)
        score = score_value(metric.raw_value, entry)
        scored.append(replace(metric, score=score))
    return tuple(scored)


def normalized_weights(
    metrics: Sequence[Metric],
    gender: str,
    tables: ReferenceTables
) -> Dict[str, float]:
    """
    Reference weights re-normalised to sum to 1 over the metrics present.

    Omitted metrics get no weight; their share is redistributed
    proportionally among the remaining ones.

    Raises:
        UnknownMetricError: A metric has no entry for this gender
        DegenerateGeometryError: No metrics to weight
    """
    raw = _reference_weights(metrics, gender, tables)
    total = sum(raw.values())
    return {metric_id: weight / total for metric_id, weight in raw.items()}


def _reference_weights(
    metrics: Sequence[Metric],
    gender: str,
    tables: ReferenceTables
) -> Dict[str, float]:
    if not metrics:
        raise DegenerateGeometryError('no metrics could be computed')
    return {m.id: tables.lookup(m.id, gender).weight for m in metrics}


def overall_score(
    metrics: Sequence[Metric],
    gender: str,
    tables: ReferenceTables
) -> float:
    """
    Weighted mean of scored metrics, i.e. the scores summed under
    normalized_weights().

    Returns:
        Overall score in [0, 100]
    """
    weights = _reference_weights(metrics, gender, tables)
    # Dividing once keeps an all-100 set at exactly 100
    total = sum(weights[m.id] * m.score for m in metrics) / sum(weights.values())

    logger.debug(f'Overall score {total:.2f} over {len(metrics)} metrics ({gender})')

    return min(100.0, max(0.0, total))
