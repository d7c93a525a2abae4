"""
InsightFace landmark detection module.

Wraps InsightFace FaceAnalysis as the external 68-point landmark detector.
Only the upload route uses it; the analysis core never imports it.
"""

import numpy as np
from insightface.app import FaceAnalysis

from .analysis.models import LandmarkSet
from .config import Config
from .errors import NoFaceDetectedError
from .logging_config import get_logger

logger = get_logger(__name__)


def initialize_face_app(config: Config) -> FaceAnalysis:
    """
    Initialize InsightFace FaceAnalysis with the 68-point landmark model.

    Args:
        config: Service configuration

    Returns:
        Initialized FaceAnalysis instance
    """
    logger.info('Initializing InsightFace landmark detector...')

    face_app = FaceAnalysis(
        allowed_modules=['detection', 'landmark_3d_68'],
        providers=['CPUExecutionProvider'],
    )
    face_app.prepare(ctx_id=0, det_size=config.detector_det_size)

    logger.info(f'✅ InsightFace initialized (det_size={config.detector_det_size})')

    return face_app


class LandmarkDetector:
    """Detects the largest face in a photo and returns its 68 landmarks."""

    def __init__(self, face_app):
        self.face_app = face_app

    @classmethod
    def from_config(cls, config: Config) -> 'LandmarkDetector':
        return cls(initialize_face_app(config))

    def detect(self, image_bgr: np.ndarray) -> LandmarkSet:
        """
        Args:
            image_bgr: Decoded photo in BGR format

        Returns:
            LandmarkSet in image pixel coordinates

        Raises:
            NoFaceDetectedError: No face, or no 68-point landmarks for it
        """
        faces = self.face_app.get(image_bgr)

        if not faces:
            raise NoFaceDetectedError('no face detected in photo')

        # Largest face by bbox area
        face = max(
            faces,
            key=lambda f: float((f.bbox[2] - f.bbox[0]) * (f.bbox[3] - f.bbox[1]))
        )

        points = getattr(face, 'landmark_3d_68', None)
        if points is None:
            raise NoFaceDetectedError('detector returned no 68-point landmarks')

        if len(faces) > 1:
            logger.info(f'{len(faces)} faces detected, analyzing the largest')

        return LandmarkSet.from_sequence(np.asarray(points)[:, :2])
