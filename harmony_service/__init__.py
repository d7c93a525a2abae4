"""
Harmony Service - Facial Harmony Scoring

Scores facial proportions, angles and symmetry from 68-point 2D facial
landmarks against gender-specific reference ranges. Exposes a Flask HTTP
API and a command line entry point.
"""

__version__ = "1.0.0"
__author__ = "Harmony Service Team"
