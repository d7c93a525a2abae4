from __future__ import annotations

import math
from typing import Dict, List, Tuple

import pytest

from harmony_service.analysis.models import LandmarkSet
from harmony_service.analysis.reference import default_reference_tables
from harmony_service.config import Config

# Frontal, mirror-symmetric face about x = 200 on integer coordinates.
# IPD is exactly 92 px, roll and yaw are 0, and every proportion sits inside
# the default male and female reference ranges.
SYMMETRIC_FACE: Tuple[Tuple[int, int], ...] = (
    # jaw 0-16
    (98, 196), (100, 222), (104, 248), (109, 278), (118, 306), (136, 328),
    (158, 340), (178, 350), (200, 354), (222, 350), (242, 340), (264, 328),
    (282, 306), (291, 278), (296, 248), (300, 222), (302, 196),
    # right brow 17-21, left brow 22-26
    (118, 182), (132, 173), (150, 168), (168, 168), (184, 172),
    (216, 172), (232, 168), (250, 168), (268, 173), (282, 182),
    # nose bridge 27-30, lower nose 31-35
    (200, 200), (200, 215), (200, 230), (200, 245),
    (179, 255), (189, 258), (200, 260), (211, 258), (221, 255),
    # right eye 36-41, left eye 42-47
    (132, 196), (146, 191), (162, 191), (176, 200), (162, 207), (146, 207),
    (224, 200), (238, 191), (254, 191), (268, 196), (254, 207), (238, 207),
    # outer lip 48-59
    (168, 287), (180, 280), (191, 276), (200, 275), (209, 276), (220, 280),
    (232, 287), (220, 294), (209, 297), (200, 298), (191, 297), (180, 294),
    # inner lip 60-67
    (172, 287), (190, 283), (200, 283), (210, 283), (228, 287), (210, 285),
    (200, 285), (190, 285),
)

SYMMETRIC_IPD = 92.0
JAW = range(0, 17)


class FaceBuilder:
    """Builds variations of the synthetic symmetric face."""

    def points(self) -> List[List[float]]:
        return [[float(x), float(y)] for x, y in SYMMETRIC_FACE]

    def symmetric(self) -> LandmarkSet:
        return LandmarkSet.from_sequence(self.points())

    def shift_jaw(self, dx: float) -> LandmarkSet:
        pts = self.points()
        for i in JAW:
            pts[i][0] += dx
        return LandmarkSet.from_sequence(pts)

    def move(self, moves: Dict[int, Tuple[float, float]]) -> LandmarkSet:
        pts = self.points()
        for i, (dx, dy) in moves.items():
            pts[i][0] += dx
            pts[i][1] += dy
        return LandmarkSet.from_sequence(pts)

    def rotate(self, degrees: float, center: Tuple[float, float] = (200.0, 260.0)) -> LandmarkSet:
        """Rotate clockwise on screen (image y grows downward)."""
        theta = math.radians(degrees)
        cos_t, sin_t = math.cos(theta), math.sin(theta)
        cx, cy = center
        rotated = []
        for x, y in self.points():
            dx, dy = x - cx, y - cy
            rotated.append([cx + cos_t * dx - sin_t * dy, cy + sin_t * dx + cos_t * dy])
        return LandmarkSet.from_sequence(rotated)

    def scale(self, factor: float) -> LandmarkSet:
        return LandmarkSet.from_sequence([[x * factor, y * factor] for x, y in self.points()])


@pytest.fixture
def face_builder() -> FaceBuilder:
    return FaceBuilder()


@pytest.fixture
def symmetric_face(face_builder) -> LandmarkSet:
    return face_builder.symmetric()


@pytest.fixture
def config() -> Config:
    return Config(
        service_name='harmony-test',
        host='127.0.0.1',
        port=5002,
        debug_mode=False,
        max_roll_degrees=15.0,
        max_yaw_proxy=0.15,
        min_ipd_pixels=30.0,
        reference_table_file=None,
        detector_det_size=(640, 640),
        min_blur_variance=50.0,
        max_upload_bytes=10 * 1024 * 1024,
    )


@pytest.fixture
def tables():
    return default_reference_tables()
