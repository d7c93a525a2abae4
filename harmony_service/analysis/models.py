"""
Data model for the analysis core.

All entities are immutable and created fresh per analysis call:
- Point / LandmarkSet: detector output, validated at the input boundary
- Metric: one named measurement and its score
- QualityReport: advisory capture-quality assessment
- AnalysisResult: the sole externally visible output
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Literal, Optional, Tuple

import numpy as np

from ..errors import InvalidGenderError, InvalidLandmarkSetError
from .landmark_indices import LANDMARK_COUNT

Gender = Literal['male', 'female']
GENDERS: Tuple[str, ...] = ('male', 'female')

MetricUnit = Literal['ratio', 'degrees', 'pixels']


def validate_gender(value: Any) -> str:
    """
    Validate caller-supplied gender.

    Args:
        value: Raw gender value from the caller

    Returns:
        The gender string

    Raises:
        InvalidGenderError: If value is not 'male' or 'female'
    """
    if not isinstance(value, str) or value not in GENDERS:
        raise InvalidGenderError(
            f'gender must be one of {", ".join(GENDERS)}, got {value!r}'
        )
    return value


@dataclass(frozen=True)
class Point:
    """2D point in image pixel space."""

    x: float
    y: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


def _coerce_point(raw: Any, index: int) -> Point:
    if isinstance(raw, Point):
        x, y = raw.x, raw.y
    elif isinstance(raw, dict):
        if 'x' not in raw or 'y' not in raw:
            raise InvalidLandmarkSetError(f'landmark {index} is missing x/y')
        x, y = raw['x'], raw['y']
    else:
        try:
            coords = list(raw)
        except TypeError:
            raise InvalidLandmarkSetError(
                f'landmark {index} is not a point: {raw!r}'
            ) from None
        if len(coords) not in (2, 3):
            raise InvalidLandmarkSetError(
                f'landmark {index} must have 2 or 3 coordinates, got {len(coords)}'
            )
        x, y = coords[0], coords[1]

    try:
        x, y = float(x), float(y)
    except (TypeError, ValueError):
        raise InvalidLandmarkSetError(
            f'landmark {index} has non-numeric coordinates'
        ) from None

    if not (math.isfinite(x) and math.isfinite(y)):
        raise InvalidLandmarkSetError(f'landmark {index} has non-finite coordinates')

    return Point(x, y)


@dataclass(frozen=True)
class LandmarkSet:
    """
    Exactly 68 landmarks in the iBUG 300-W ordering.

    Build instances with LandmarkSet.from_sequence() so the count and
    coordinates are validated.
    """

    points: Tuple[Point, ...]

    def __post_init__(self):
        points = tuple(self.points)
        if len(points) != LANDMARK_COUNT:
            raise InvalidLandmarkSetError(
                f'expected {LANDMARK_COUNT} landmarks, got {len(points)}'
            )
        if not all(isinstance(p, Point) for p in points):
            raise InvalidLandmarkSetError('points must be Point instances; use from_sequence()')
        object.__setattr__(self, 'points', points)

    @classmethod
    def from_sequence(cls, raw: Any) -> 'LandmarkSet':
        """
        Build a landmark set from detector output.

        Accepts [[x, y], ...], [{'x': .., 'y': ..}, ...], Point instances,
        or a numpy array shaped (68, 2) / (68, 3). A z coordinate is dropped.

        Raises:
            InvalidLandmarkSetError: Wrong count or malformed points
        """
        if raw is None or isinstance(raw, (str, bytes, dict)):
            raise InvalidLandmarkSetError('landmarks must be a sequence of points')

        if isinstance(raw, np.ndarray):
            if raw.ndim != 2 or raw.shape[1] not in (2, 3):
                raise InvalidLandmarkSetError(
                    f'landmark array must be shaped (68, 2) or (68, 3), got {raw.shape}'
                )
            raw = raw.tolist()

        try:
            items = list(raw)
        except TypeError:
            raise InvalidLandmarkSetError('landmarks must be a sequence of points') from None

        if len(items) != LANDMARK_COUNT:
            raise InvalidLandmarkSetError(
                f'expected {LANDMARK_COUNT} landmarks, got {len(items)}'
            )

        return cls(tuple(_coerce_point(item, i) for i, item in enumerate(items)))

    def __len__(self) -> int:
        return len(self.points)

    def __getitem__(self, index: int) -> Point:
        return self.points[index]

    def __iter__(self):
        return iter(self.points)

    def select(self, indices: Iterable[int]) -> Tuple[Point, ...]:
        return tuple(self.points[i] for i in indices)

    def as_array(self) -> np.ndarray:
        """Return a read-only (68, 2) float array."""
        arr = np.array([p.as_tuple() for p in self.points], dtype=np.float64)
        arr.setflags(write=False)
        return arr

    def to_list(self) -> list:
        return [[p.x, p.y] for p in self.points]


@dataclass(frozen=True)
class Metric:
    """One named measurement. Score is 0 until the scoring engine fills it."""

    id: str
    raw_value: float
    unit: MetricUnit
    score: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, 'score', min(100.0, max(0.0, float(self.score))))


@dataclass(frozen=True)
class QualityReport:
    roll_degrees: float
    yaw_proxy: float
    interpupillary_distance_pixels: float
    acceptable: bool
    issues: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'roll': self.roll_degrees,
            'yaw': self.yaw_proxy,
            'ipd': self.interpupillary_distance_pixels,
            'acceptable': self.acceptable,
            'issues': list(self.issues),
        }


@dataclass(frozen=True)
class AnalysisResult:
    """
    Output of one analysis call.

    Owned by the caller; never mutated after return.
    """

    metrics: Tuple[Metric, ...]
    overall_score: float
    quality: QualityReport
    summary: str
    gender: str
    omitted_metrics: Tuple[str, ...] = field(default=())

    def metric(self, metric_id: str) -> Optional[Metric]:
        for m in self.metrics:
            if m.id == metric_id:
                return m
        return None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation for the browser client."""
        return {
            'gender': self.gender,
            'overallScore': self.overall_score,
            'metrics': [
                {
                    'id': m.id,
                    'rawValue': m.raw_value,
                    'unit': m.unit,
                    'score': m.score,
                }
                for m in self.metrics
            ],
            'omittedMetrics': list(self.omitted_metrics),
            'quality': self.quality.to_dict(),
            'summary': self.summary,
        }
