"""
Utility modules package.
"""

from .timing import format_uptime

__all__ = [
    'format_uptime',
]
