"""
Facial metrics calculation module.

Derives the named proportion, angle and symmetry measurements from a
68-point landmark set. Each metric:
1. Selects the landmarks it needs
2. Measures distances/angles with the geometry primitives
3. Reduces them to one ratio or angle

Inter-pupillary distance is the shared scale normaliser. The facial
midline is the line through the nose bridge landmarks (nasion and
nose tip).
"""

from dataclasses import dataclass
from typing import Callable, List, Tuple

from ..errors import DivisionByZeroError, GeometryError
from ..logging_config import get_logger
from . import landmark_indices as idx
from .geometry import angle, distance, distance_to_line, line_angle, midpoint, project, ratio
from .models import LandmarkSet, Metric, MetricUnit, Point
from .quality import head_roll, interpupillary_distance

logger = get_logger(__name__)


@dataclass(frozen=True)
class FaceFrame:
    """Shared per-face measurements reused by several metrics."""

    landmarks: LandmarkSet
    ipd: float

    @property
    def nasion(self) -> Point:
        return self.landmarks[idx.NASION]

    @property
    def nose_tip(self) -> Point:
        return self.landmarks[idx.NOSE_TIP]

    @property
    def brow_line(self) -> Point:
        return midpoint(self.landmarks[idx.RIGHT_BROW_PEAK], self.landmarks[idx.LEFT_BROW_PEAK])

    def axial(self, p: Point) -> float:
        """Position of p along the facial midline, growing toward the chin."""
        return project(p, self.nasion, self.nose_tip)

    def vertical_span(self, top: Point, bottom: Point) -> float:
        return self.axial(bottom) - self.axial(top)

    def midline_distance(self, index: int) -> float:
        return distance_to_line(self.landmarks[index], self.nasion, self.nose_tip)

    def d(self, i: int, j: int) -> float:
        return distance(self.landmarks[i], self.landmarks[j])


@dataclass(frozen=True)
class MetricDefinition:
    id: str
    label: str
    unit: MetricUnit
    category: str
    compute: Callable[[FaceFrame], float]


@dataclass(frozen=True)
class MetricsComputation:
    metrics: Tuple[Metric, ...]
    omitted: Tuple[str, ...]


# Proportions

def _facial_thirds(f: FaceFrame) -> float:
    # Hairline is not in the 68-point set: compare lower third to middle third.
    subnasale = f.landmarks[idx.SUBNASALE]
    middle = f.vertical_span(f.brow_line, subnasale)
    lower = f.vertical_span(subnasale, f.landmarks[idx.MENTON])
    return ratio(lower, middle)


def _facial_width_to_height(f: FaceFrame) -> float:
    width = f.d(idx.RIGHT_ZYGION, idx.LEFT_ZYGION)
    height = f.vertical_span(f.brow_line, f.landmarks[idx.UPPER_LIP_TOP])
    return ratio(width, height)


def _bigonial_bizygomatic(f: FaceFrame) -> float:
    return ratio(
        f.d(idx.RIGHT_GONION, idx.LEFT_GONION),
        f.d(idx.RIGHT_ZYGION, idx.LEFT_ZYGION),
    )


# Features

def _nasal_index(f: FaceFrame) -> float:
    return ratio(f.d(idx.RIGHT_ALAR, idx.LEFT_ALAR), f.d(idx.NASION, idx.SUBNASALE))


def _lip_fullness(f: FaceFrame) -> float:
    return ratio(
        f.d(idx.LOWER_LIP_INNER, idx.LOWER_LIP_BOTTOM),
        f.d(idx.UPPER_LIP_TOP, idx.UPPER_LIP_INNER),
    )


def _philtrum_to_lip(f: FaceFrame) -> float:
    return ratio(
        f.d(idx.SUBNASALE, idx.UPPER_LIP_TOP),
        f.d(idx.UPPER_LIP_TOP, idx.UPPER_LIP_INNER),
    )


def _eye_width_to_ipd(f: FaceFrame) -> float:
    right = f.d(idx.RIGHT_EYE_OUTER, idx.RIGHT_EYE_INNER)
    left = f.d(idx.LEFT_EYE_INNER, idx.LEFT_EYE_OUTER)
    return ratio((right + left) / 2.0, f.ipd)


# Angles

def _wrap(degrees: float) -> float:
    while degrees > 90.0:
        degrees -= 180.0
    while degrees <= -90.0:
        degrees += 180.0
    return degrees


def _canthal_tilt(f: FaceFrame) -> float:
    lm = f.landmarks
    roll = head_roll(lm)
    # positive when the outer corner sits above the inner corner
    right = _wrap(line_angle(lm[idx.RIGHT_EYE_OUTER], lm[idx.RIGHT_EYE_INNER]) - roll)
    left = _wrap(roll - line_angle(lm[idx.LEFT_EYE_INNER], lm[idx.LEFT_EYE_OUTER]))
    return (right + left) / 2.0


def _jaw_angle(f: FaceFrame) -> float:
    lm = f.landmarks
    right = angle(lm[idx.RIGHT_ZYGION], lm[idx.RIGHT_GONION], lm[idx.MENTON])
    left = angle(lm[idx.LEFT_ZYGION], lm[idx.LEFT_GONION], lm[idx.MENTON])
    return (right + left) / 2.0


# Symmetry

def _symmetry_delta(pairs: Tuple[Tuple[int, int], ...]) -> Callable[[FaceFrame], float]:
    def compute(f: FaceFrame) -> float:
        deltas = [
            ratio(abs(f.midline_distance(r) - f.midline_distance(l)), f.ipd)
            for r, l in pairs
        ]
        return sum(deltas) / len(deltas)
    return compute


METRIC_DEFINITIONS: Tuple[MetricDefinition, ...] = (
    MetricDefinition('facial_thirds', 'Facial thirds balance', 'ratio', 'proportion', _facial_thirds),
    MetricDefinition('facial_width_to_height', 'Facial width-to-height ratio', 'ratio', 'proportion', _facial_width_to_height),
    MetricDefinition('bigonial_bizygomatic', 'Bigonial-to-bizygomatic width', 'ratio', 'proportion', _bigonial_bizygomatic),
    MetricDefinition('nasal_index', 'Nasal index', 'ratio', 'feature', _nasal_index),
    MetricDefinition('lip_fullness', 'Lip fullness ratio', 'ratio', 'feature', _lip_fullness),
    MetricDefinition('philtrum_to_lip', 'Philtrum-to-lip ratio', 'ratio', 'feature', _philtrum_to_lip),
    MetricDefinition('eye_width_to_ipd', 'Eye width to IPD', 'ratio', 'feature', _eye_width_to_ipd),
    MetricDefinition('canthal_tilt', 'Canthal tilt', 'degrees', 'angle', _canthal_tilt),
    MetricDefinition('jaw_angle', 'Jaw angle', 'degrees', 'angle', _jaw_angle),
    MetricDefinition('jaw_symmetry', 'Jaw symmetry', 'ratio', 'symmetry', _symmetry_delta(idx.JAW_PAIRS)),
    MetricDefinition('eyebrow_symmetry', 'Eyebrow symmetry', 'ratio', 'symmetry', _symmetry_delta(idx.BROW_PAIRS)),
    MetricDefinition('eye_symmetry', 'Eye symmetry', 'ratio', 'symmetry', _symmetry_delta(idx.EYE_PAIRS)),
    MetricDefinition('mouth_symmetry', 'Mouth symmetry', 'ratio', 'symmetry', _symmetry_delta(idx.MOUTH_PAIRS)),
)

METRIC_IDS: Tuple[str, ...] = tuple(d.id for d in METRIC_DEFINITIONS)

_BY_ID = {d.id: d for d in METRIC_DEFINITIONS}


def get_definition(metric_id: str) -> MetricDefinition:
    return _BY_ID[metric_id]


def metric_label(metric_id: str) -> str:
    definition = _BY_ID.get(metric_id)
    return definition.label if definition else metric_id


def calculate_metrics(landmarks: LandmarkSet) -> MetricsComputation:
    """
    Compute every named metric for a landmark set.

    A metric whose own geometry is degenerate is left out and listed in
    `omitted`; the scoring engine then redistributes its weight.

    Args:
        landmarks: Validated landmark set

    Returns:
        MetricsComputation with metrics in declaration order (scores unset)

    Raises:
        DivisionByZeroError: If the IPD normaliser is zero
    """
    ipd = interpupillary_distance(landmarks)
    if ipd == 0:
        raise DivisionByZeroError('inter-pupillary distance is zero')

    frame = FaceFrame(landmarks=landmarks, ipd=ipd)

    metrics: List[Metric] = []
    omitted: List[str] = []

    for definition in METRIC_DEFINITIONS:
        try:
            value = definition.compute(frame)
        except GeometryError as e:
            logger.warning(f'Metric {definition.id} omitted: {e}')
            omitted.append(definition.id)
            continue

        logger.debug(f'{definition.id} = {value:.4f} {definition.unit}')
        metrics.append(Metric(id=definition.id, raw_value=float(value), unit=definition.unit))

    return MetricsComputation(metrics=tuple(metrics), omitted=tuple(omitted))
