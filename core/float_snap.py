#!/usr/bin/env python3
"""
Float Snap Module
Rounds values that land within a tiny distance of an integer.

The trigonometric conversions leave residue such as 0.9999998 or 6.1e-17 in
transforms that were authored as clean numbers. Snapping restores them.
"""

import numpy as np

# Default distance to the nearest integer under which a value is snapped
DEFAULT_THRESHOLD = 1.53e-05


def snap_float(value: float, threshold: float = DEFAULT_THRESHOLD) -> float:
    """Snap a value to the nearest integer when within threshold

    Args:
        value: Value to fix
        threshold: Maximum distance to the nearest integer

    Returns:
        float: The nearest integer (as float) or the unchanged value
    """
    nearest = float(np.round(value))
    return nearest if abs(value - nearest) <= threshold else float(value)


def snap_vector(values, threshold: float = DEFAULT_THRESHOLD) -> np.ndarray:
    """Snap every component of a vector (see snap_float)"""
    values = np.asarray(values, dtype=np.float64)
    nearest = np.round(values)
    return np.where(np.abs(values - nearest) <= threshold, nearest, values)
