"""
Facial harmony analysis package.

Contains modules for:
- Landmark data model and input validation
- Geometry primitives
- Capture quality assessment
- Facial metric calculation
- Reference tables and scoring
- Summary generation
"""

from .models import (
    GENDERS,
    AnalysisResult,
    LandmarkSet,
    Metric,
    Point,
    QualityReport,
    validate_gender,
)
from .quality import assess_quality
from .metrics import METRIC_DEFINITIONS, METRIC_IDS, calculate_metrics
from .reference import (
    ReferenceEntry,
    ReferenceTables,
    default_reference_tables,
    load_reference_tables,
)
from .scoring import normalized_weights, overall_score, score_metrics, score_value
from .summary import generate_summary
from .pipeline import analyze_landmarks, format_metrics

__all__ = [
    'GENDERS',
    'AnalysisResult',
    'LandmarkSet',
    'Metric',
    'Point',
    'QualityReport',
    'validate_gender',
    'assess_quality',
    'METRIC_DEFINITIONS',
    'METRIC_IDS',
    'calculate_metrics',
    'ReferenceEntry',
    'ReferenceTables',
    'default_reference_tables',
    'load_reference_tables',
    'normalized_weights',
    'overall_score',
    'score_metrics',
    'score_value',
    'generate_summary',
    'analyze_landmarks',
    'format_metrics',
]
