"""
Image handling for the upload route.

Decodes uploaded photos and measures advisory image quality:
- Sharpness (Laplacian variance)
- Brightness (mean pixel value)

Images are only held in memory for the duration of one request.
"""

from typing import Any, Dict

import cv2
import numpy as np

from .config import Config
from .errors import ImageDecodeError


def decode_image(data: bytes) -> np.ndarray:
    """
    Decode image bytes into a BGR array.

    Raises:
        ImageDecodeError: Empty or undecodable data
    """
    if not data:
        raise ImageDecodeError('empty image upload')

    nparr = np.frombuffer(data, np.uint8)
    image = cv2.imdecode(nparr, cv2.IMREAD_COLOR)

    if image is None:
        raise ImageDecodeError('could not decode image')

    return image


def compute_blur_score(gray: np.ndarray) -> float:
    """
    Compute blur score using Laplacian variance.

    Higher values indicate sharper images.
    """
    return float(cv2.Laplacian(gray, cv2.CV_64F).var())


def image_quality(image_bgr: np.ndarray, config: Config) -> Dict[str, Any]:
    """
    Measure advisory image quality.

    Returns:
        Dict with width, height, blur_score, brightness and a 'sharp' flag
        (blur_score >= min_blur_variance)
    """
    gray = cv2.cvtColor(image_bgr, cv2.COLOR_BGR2GRAY)
    blur_score = compute_blur_score(gray)
    height, width = gray.shape[:2]

    return {
        'width': int(width),
        'height': int(height),
        'blurScore': blur_score,
        'brightness': float(np.mean(gray)),
        'sharp': blur_score >= config.min_blur_variance,
    }
