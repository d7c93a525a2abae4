"""
Capture quality assessment module.

Evaluates how reliable a landmark set is for scoring, based on:
- Head roll (tilt of the outer eye-corner line)
- Head yaw proxy (nose tip offset from the eye midpoint, relative to IPD)
- Inter-pupillary distance (face too small in frame)

The assessment is advisory: an unacceptable capture is still scored.
"""

from typing import List, Tuple

from ..config import Config
from ..logging_config import get_logger
from . import landmark_indices as idx
from .geometry import centroid, distance, line_angle, midpoint, project, ratio
from .models import LandmarkSet, Point, QualityReport

logger = get_logger(__name__)


def eye_centers(landmarks: LandmarkSet) -> Tuple[Point, Point]:
    """Return (right, left) eye centres as the mean of each eye contour."""
    return (
        centroid(landmarks.select(idx.RIGHT_EYE)),
        centroid(landmarks.select(idx.LEFT_EYE)),
    )


def interpupillary_distance(landmarks: LandmarkSet) -> float:
    right, left = eye_centers(landmarks)
    return distance(right, left)


def head_roll(landmarks: LandmarkSet) -> float:
    """Roll in degrees, clockwise positive."""
    return line_angle(landmarks[idx.RIGHT_EYE_OUTER], landmarks[idx.LEFT_EYE_OUTER])


def yaw_proxy(landmarks: LandmarkSet, ipd: float) -> float:
    """
    Nose tip offset from the outer eye-corner midpoint, divided by IPD.

    The offset is measured along the eye-corner line so head roll does
    not leak into it. Positive when the nose tip sits toward the image right.
    """
    outer_right = landmarks[idx.RIGHT_EYE_OUTER]
    outer_left = landmarks[idx.LEFT_EYE_OUTER]
    center = midpoint(outer_right, outer_left)
    offset = project(landmarks[idx.NOSE_TIP], center, outer_left)
    return ratio(offset, ipd)


def assess_quality(landmarks: LandmarkSet, config: Config) -> QualityReport:
    """
    Check if the capture is reliable enough for meaningful scoring.

    Criteria:
    - |roll| <= max_roll_degrees
    - |yaw proxy| <= max_yaw_proxy
    - IPD >= min_ipd_pixels

    Args:
        landmarks: Validated landmark set
        config: Service configuration

    Returns:
        QualityReport with acceptable flag and the list of failed checks

    Raises:
        DegenerateGeometryError / DivisionByZeroError: Landmarks are degenerate
    """
    ipd = interpupillary_distance(landmarks)
    roll = head_roll(landmarks)
    yaw = yaw_proxy(landmarks, ipd)

    logger.debug(f'Quality: roll={roll:.2f}° yaw={yaw:.3f} ipd={ipd:.1f}px')

    issues: List[str] = []

    if abs(roll) > config.max_roll_degrees:
        logger.warning(f'Head roll {roll:.1f}° exceeds {config.max_roll_degrees}°')
        issues.append('roll')

    if abs(yaw) > config.max_yaw_proxy:
        logger.warning(f'Head yaw proxy {yaw:.3f} exceeds {config.max_yaw_proxy}')
        issues.append('yaw')

    if ipd < config.min_ipd_pixels:
        logger.warning(f'IPD {ipd:.1f}px below {config.min_ipd_pixels}px, face too small')
        issues.append('ipd')

    return QualityReport(
        roll_degrees=roll,
        yaw_proxy=yaw,
        interpupillary_distance_pixels=ipd,
        acceptable=not issues,
        issues=tuple(issues),
    )
