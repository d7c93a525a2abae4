"""
Plain-text harmony report.
"""

from typing import List

from .analysis.models import AnalysisResult
from .analysis.pipeline import format_metrics
from .analysis.reference import ReferenceTables

DISCLAIMER = (
    'Photo-based approximation from 2D landmarks. Not medical advice; '
    'for educational and entertainment purposes only.'
)


def render_text_report(result: AnalysisResult, tables: ReferenceTables) -> str:
    """
    Render an AnalysisResult as a fixed-width text report.

    Args:
        result: Completed analysis
        tables: Reference tables the result was scored against

    Returns:
        Report text, newline terminated
    """
    quality = result.quality
    lines: List[str] = [
        'Facial Harmony Report',
        '=' * 60,
        f'Reference set: {result.gender}',
        f'Overall score: {result.overall_score:.1f} / 100',
        '',
        result.summary,
        '',
        'Capture quality',
        '-' * 60,
        f'  Roll:      {quality.roll_degrees:+.1f}°',
        f'  Yaw proxy: {quality.yaw_proxy:+.3f}',
        f'  IPD:       {quality.interpupillary_distance_pixels:.0f}px',
        f'  Status:    {"acceptable" if quality.acceptable else "unreliable (" + ", ".join(quality.issues) + ")"}',
        '',
        'Metrics',
        '-' * 60,
    ]

    for row in format_metrics(result, tables):
        lines.append(
            f"  {row['label']:<30} {row['value']:>9}  ideal {row['ideal']:<15} {row['score']:>5.1f}"
        )

    if result.omitted_metrics:
        lines.append('')
        lines.append(f"  Not measurable: {', '.join(result.omitted_metrics)}")

    lines.append('')
    lines.append(DISCLAIMER)

    return '\n'.join(lines) + '\n'
