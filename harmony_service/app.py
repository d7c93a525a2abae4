"""
Flask application for HTTP API.

Provides:
- GET /health: Service health check
- POST /api/analyze: Score a detected 68-point landmark set
- POST /api/analyze/image: Detect landmarks in an uploaded photo, then score

Analysis errors are returned as JSON {"error": code, "message": ...}.
"""

import threading
import time
from typing import Any, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from .analysis.metrics import METRIC_IDS
from .analysis.models import validate_gender
from .analysis.pipeline import analyze_landmarks, format_metrics
from .analysis.reference import ReferenceTables, load_reference_tables
from .config import Config
from .errors import (
    ConfigurationError,
    DetectorUnavailableError,
    GeometryError,
    HarmonyError,
    InputError,
)
from .imaging import decode_image, image_quality
from .logging_config import get_logger
from .utils.timing import format_uptime

logger = get_logger(__name__)

UNANALYZABLE_MESSAGE = 'Could not analyze this photo. Try a clear, frontal, well-lit photo.'
DETECTOR_HINT = "photo analysis needs the detector extra: pip install 'harmony-service[detector]'"


def load_landmark_detector(config: Config):
    """
    Create the InsightFace landmark detector.

    Raises:
        DetectorUnavailableError: insightface is not installed
    """
    try:
        # Import here so JSON-only deployments never load the model
        from .face_app import LandmarkDetector
    except ImportError as e:
        raise DetectorUnavailableError(DETECTOR_HINT) from e
    return LandmarkDetector.from_config(config)


class _LazyDetector:
    """Creates the InsightFace detector on first use."""

    def __init__(self, config: Config):
        self.config = config
        self._detector = None
        self._lock = threading.Lock()

    @property
    def loaded(self) -> bool:
        return self._detector is not None

    def get(self):
        if self._detector is None:
            with self._lock:
                if self._detector is None:
                    self._detector = load_landmark_detector(self.config)
        return self._detector


def _result_payload(result, tables: ReferenceTables) -> dict:
    payload = result.to_dict()
    payload['formattedMetrics'] = format_metrics(result, tables)
    return payload


def create_app(
    config: Config,
    tables: Optional[ReferenceTables] = None,
    detector: Optional[Any] = None
) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Service configuration
        tables: Reference tables (loaded from config when omitted)
        detector: Object with detect(image_bgr) -> LandmarkSet; an
            InsightFace detector is created on first upload when omitted

    Returns:
        Configured Flask app
    """
    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = config.max_upload_bytes
    CORS(app)

    if tables is None:
        tables = load_reference_tables(config)
    lazy_detector = None if detector is not None else _LazyDetector(config)
    started_at = time.time()

    def get_detector():
        return detector if detector is not None else lazy_detector.get()

    @app.errorhandler(HarmonyError)
    def handle_harmony_error(e: HarmonyError):
        if isinstance(e, DetectorUnavailableError):
            logger.error(f'❌ {e}')
            message = str(e)
        elif isinstance(e, ConfigurationError):
            logger.error(f'❌ Configuration error: {e}', exc_info=True)
            message = 'Internal configuration error'
        elif isinstance(e, InputError):
            logger.info(f'Rejected request: {e}')
            message = str(e)
        else:
            logger.warning(f'Photo could not be analyzed: {e}')
            message = UNANALYZABLE_MESSAGE if isinstance(e, GeometryError) else str(e)

        return jsonify({'error': e.code, 'message': message}), e.http_status

    @app.errorhandler(413)
    def handle_upload_too_large(e):
        logger.info(f'Rejected upload larger than {config.max_upload_bytes} bytes')
        return jsonify({
            'error': 'upload_too_large',
            'message': f'upload exceeds the {config.max_upload_bytes} byte limit',
        }), 413

    @app.route('/health')
    def health():
        """Health check endpoint."""
        return jsonify({
            'status': 'ok',
            'service': config.service_name,
            'uptime': format_uptime(time.time() - started_at),
            'detectorLoaded': detector is not None or lazy_detector.loaded,
            'metrics': len(METRIC_IDS),
        })

    @app.route('/api/analyze', methods=['POST'])
    def analyze():
        """Score a landmark set sent as JSON."""
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            return jsonify({
                'error': 'invalid_input',
                'message': 'expected a JSON object with landmarks and gender',
            }), 400

        result = analyze_landmarks(body.get('landmarks'), body.get('gender'), tables, config)
        return jsonify(_result_payload(result, tables))

    @app.route('/api/analyze/image', methods=['POST'])
    def analyze_image():
        """Detect landmarks in an uploaded photo, then score them."""
        upload = request.files.get('file')
        if upload is None:
            return jsonify({
                'error': 'invalid_input',
                'message': "expected a multipart 'file' field",
            }), 400

        # Validate gender before running the detector
        gender = validate_gender(request.form.get('gender'))

        image = decode_image(upload.read())
        quality = image_quality(image, config)
        landmarks = get_detector().detect(image)

        result = analyze_landmarks(landmarks, gender, tables, config)

        payload = _result_payload(result, tables)
        payload['landmarks'] = landmarks.to_list()
        payload['imageQuality'] = quality
        return jsonify(payload)

    return app
