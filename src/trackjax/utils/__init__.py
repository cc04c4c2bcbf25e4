"""Shared utility functions for trackjax.

Provides angle wrapping helpers used by the process and measurement models.
"""

from trackjax.utils._angle import normalize_angle, normalize_component

__all__ = [
    "normalize_angle",
    "normalize_component",
]
