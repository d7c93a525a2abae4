"""
Error types for the Harmony Service.

Every failure the analysis core can raise derives from HarmonyError and
carries a stable code plus the HTTP status the API layer reports it with:
- Input errors: caller data violates the contract (400)
- Geometry errors: landmarks are degenerate, photo cannot be analyzed (422)
- Configuration errors: reference tables out of sync with metrics (500),
  or the landmark detector is not installed (503)
- Detection errors: the external detector found nothing usable (422)
"""


class HarmonyError(Exception):
    """Base class for all service errors."""

    code = 'harmony_error'
    http_status = 500


class InputError(HarmonyError):
    code = 'invalid_input'
    http_status = 400


class InvalidLandmarkSetError(InputError):
    """Landmark set is not exactly 68 finite 2D points."""

    code = 'invalid_landmark_set'


class InvalidGenderError(InputError):
    """Gender is not one of the supported reference sets."""

    code = 'invalid_gender'


class GeometryError(HarmonyError):
    code = 'degenerate_geometry'
    http_status = 422


class DegenerateGeometryError(GeometryError):
    """A computation needs a non-zero baseline but got coincident points."""


class DivisionByZeroError(GeometryError, ZeroDivisionError):
    """Ratio with a zero denominator."""

    code = 'division_by_zero'


class ConfigurationError(HarmonyError):
    code = 'configuration_error'
    http_status = 500


class UnknownMetricError(ConfigurationError):
    """Metric id has no reference entry for the requested gender."""

    code = 'unknown_metric'


class ReferenceTableError(ConfigurationError):
    """Reference table data is malformed."""

    code = 'invalid_reference_table'


class DetectorUnavailableError(ConfigurationError):
    """Photo analysis requested but the detector extra is not installed."""

    code = 'detector_unavailable'
    http_status = 503


class DetectionError(HarmonyError):
    code = 'detection_failed'
    http_status = 422


class NoFaceDetectedError(DetectionError):
    code = 'no_face_detected'


class ImageDecodeError(DetectionError):
    code = 'invalid_image'
    http_status = 400
