"""
Analysis pipeline.

Runs one analysis for an already-detected landmark set:
1. Validate gender and landmarks (input boundary)
2. Quality assessment and metric calculation (independent)
3. Per-metric scoring and weighted aggregation
4. Narrative summary

Synchronous and pure: no shared state between calls, no I/O.
"""

from typing import Any, Dict, List

from ..config import Config
from ..logging_config import get_logger
from .metrics import calculate_metrics, get_definition
from .models import AnalysisResult, LandmarkSet, validate_gender
from .quality import assess_quality
from .reference import ReferenceTables
from .scoring import overall_score, score_metrics
from .summary import generate_summary

logger = get_logger(__name__)


def analyze_landmarks(
    landmarks: Any,
    gender: Any,
    tables: ReferenceTables,
    config: Config
) -> AnalysisResult:
    """
    Score facial harmony for one landmark set.

    Quality is advisory: an unacceptable capture is still scored and the
    caller decides how to present it.

    Args:
        landmarks: LandmarkSet or raw detector output (68 points)
        gender: 'male' or 'female'
        tables: Reference tables to score against
        config: Service configuration (quality thresholds)

    Returns:
        AnalysisResult

    Raises:
        InvalidGenderError, InvalidLandmarkSetError: Bad caller input
        DegenerateGeometryError, DivisionByZeroError: Photo cannot be analyzed
        UnknownMetricError: Reference tables out of sync with the metrics
    """
    gender = validate_gender(gender)
    if not isinstance(landmarks, LandmarkSet):
        landmarks = LandmarkSet.from_sequence(landmarks)

    quality = assess_quality(landmarks, config)
    computation = calculate_metrics(landmarks)

    metrics = score_metrics(computation.metrics, gender, tables)
    overall = overall_score(metrics, gender, tables)
    summary = generate_summary(overall, metrics, gender)

    logger.info(
        f'Analysis complete: overall={overall:.1f} gender={gender} '
        f'quality={"ok" if quality.acceptable else ",".join(quality.issues)}'
    )

    return AnalysisResult(
        metrics=metrics,
        overall_score=overall,
        quality=quality,
        summary=summary,
        gender=gender,
        omitted_metrics=computation.omitted,
    )


def _format_number(value: float, unit: str) -> str:
    if unit == 'degrees':
        return f'{value:.1f}°'
    if unit == 'pixels':
        return f'{value:.0f}px'
    return f'{value:.3f}'


def format_metrics(result: AnalysisResult, tables: ReferenceTables) -> List[Dict[str, Any]]:
    """
    Build display rows for the results grid.

    Each row holds the metric label, category, formatted value, the ideal
    for the result's gender and the rounded score.
    """
    rows = []
    for metric in result.metrics:
        definition = get_definition(metric.id)
        entry = tables.lookup(metric.id, result.gender)
        low, high = entry.bounds
        if entry.is_range:
            ideal = f'{_format_number(low, metric.unit)}–{_format_number(high, metric.unit)}'
        else:
            ideal = _format_number(low, metric.unit)

        rows.append({
            'id': metric.id,
            'label': definition.label,
            'category': definition.category,
            'value': _format_number(metric.raw_value, metric.unit),
            'ideal': ideal,
            'score': round(metric.score, 1),
        })
    return rows
