"""
Utility functions for the performance engine
"""

from .colors import (
    hex_to_hsv,
    hsv_to_hex,
    hsv_to_xy,
    xy_to_hsv,
    velocity_to_brightness,
)

__all__ = [
    'hex_to_hsv',
    'hsv_to_hex',
    'hsv_to_xy',
    'xy_to_hsv',
    'velocity_to_brightness',
]
