"""
Configuration module for Harmony Service.

Loads configuration from environment variables with sensible defaults.
All settings are immutable after initialization.
"""

import os
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Config:
    """
    Immutable configuration for Harmony Service.

    Service Identity:
        service_name: Name of this service instance (used in log context)
        host: Bind address for the Flask HTTP server
        port: Port for the Flask HTTP server
        debug_mode: Enable debug logging

    Capture Quality Thresholds:
        max_roll_degrees: Largest acceptable head roll (eye-corner line tilt)
        max_yaw_proxy: Largest acceptable nose offset, as a fraction of IPD
        min_ipd_pixels: Smallest acceptable inter-pupillary distance

    Reference Data:
        reference_table_file: Optional JSON file replacing the built-in
            reference tables; None uses the shipped defaults

    Image Upload (detector route only):
        detector_det_size: Detection size for InsightFace (width, height)
        min_blur_variance: Laplacian variance below which a photo is flagged blurry
        max_upload_bytes: Largest accepted upload
    """

    # Service
    service_name: str
    host: str
    port: int
    debug_mode: bool

    # Quality
    max_roll_degrees: float
    max_yaw_proxy: float
    min_ipd_pixels: float

    # Reference data
    reference_table_file: Optional[str]

    # Image upload
    detector_det_size: Tuple[int, int]
    min_blur_variance: float
    max_upload_bytes: int


def load_config() -> Config:
    """
    Load configuration from environment variables.

    Returns:
        Config: Immutable configuration object
    """
    det_size = int(os.getenv('DETECTOR_DET_SIZE', '640'))

    return Config(
        # Service
        service_name=os.getenv('SERVICE_NAME', 'harmony'),
        host=os.getenv('HOST', '0.0.0.0'),
        port=int(os.getenv('PORT', '5002')),
        debug_mode=os.getenv('DEBUG', 'false').lower() == 'true',

        # Quality
        max_roll_degrees=float(os.getenv('MAX_ROLL_DEGREES', '15.0')),
        max_yaw_proxy=float(os.getenv('MAX_YAW_PROXY', '0.15')),
        min_ipd_pixels=float(os.getenv('MIN_IPD_PIXELS', '30.0')),

        # Reference data
        reference_table_file=os.getenv('REFERENCE_TABLE_FILE') or None,

        # Image upload
        detector_det_size=(det_size, det_size),
        min_blur_variance=float(os.getenv('MIN_BLUR_VAR', '50.0')),
        max_upload_bytes=int(float(os.getenv('MAX_UPLOAD_MB', '10')) * 1024 * 1024),
    )
