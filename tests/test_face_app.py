from types import SimpleNamespace

import numpy as np
import pytest

pytest.importorskip('insightface')

from harmony_service.errors import NoFaceDetectedError  # noqa: E402
from harmony_service.face_app import LandmarkDetector  # noqa: E402


class FakeFaceApp:
    def __init__(self, faces):
        self.faces = faces

    def get(self, image_bgr):
        return self.faces


def make_face(bbox, landmarks):
    return SimpleNamespace(bbox=np.asarray(bbox, dtype=float), landmark_3d_68=landmarks)


def test_detect_picks_largest_face(face_builder):
    points = np.asarray(face_builder.points(), dtype=float)
    small = np.column_stack([points / 4, np.zeros(68)])
    large = np.column_stack([points, np.full(68, 5.0)])

    detector = LandmarkDetector(FakeFaceApp([
        make_face([0, 0, 20, 20], small),
        make_face([100, 100, 300, 350], large),
    ]))

    landmarks = detector.detect(np.zeros((10, 10, 3), dtype=np.uint8))

    assert len(landmarks) == 68
    assert landmarks.to_list() == [[float(x), float(y)] for x, y in face_builder.points()]


def test_detect_without_faces():
    detector = LandmarkDetector(FakeFaceApp([]))
    with pytest.raises(NoFaceDetectedError):
        detector.detect(np.zeros((10, 10, 3), dtype=np.uint8))


def test_detect_without_68_point_model():
    detector = LandmarkDetector(FakeFaceApp([make_face([0, 0, 10, 10], None)]))
    with pytest.raises(NoFaceDetectedError):
        detector.detect(np.zeros((10, 10, 3), dtype=np.uint8))
