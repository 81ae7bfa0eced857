"""
Adaptive query grid: denser sampling where the data changes quickly
"""
from __future__ import annotations

import numpy as np

from backend.config import MAX_BASE_POINTS, MAX_DENSITY_BOOST, POINTS_PER_SAMPLE


def base_point_count(n_samples: int, max_points: int = MAX_BASE_POINTS) -> int:
    return min(max_points, n_samples * POINTS_PER_SAMPLE)


def segment_density(y_norm: np.ndarray) -> np.ndarray:
    """Density multiplier per segment, 1 (flat) to 1 + MAX_DENSITY_BOOST (steepest)"""
    gradient = np.abs(np.diff(np.asarray(y_norm, dtype=float)))
    if gradient.size == 0:
        return np.ones(1)
    max_gradient = gradient.max()
    if not np.isfinite(max_gradient) or max_gradient == 0:
        return np.ones_like(gradient)
    return 1 + MAX_DENSITY_BOOST * (gradient / max_gradient)


def adaptive_grid(x_norm, y_norm, max_points: int = MAX_BASE_POINTS) -> np.ndarray:
    """Build the shared query grid over [0, 1].

    Walks from 0 in steps of 1 / (base * density), where the density comes
    from the segment under the cursor. The last emitted point is <= 1, so the
    grid may stop just short of 1.
    """
    n = len(x_norm)
    if n == 0:
        return np.zeros(0)

    base_points = base_point_count(n, max_points)
    density = segment_density(y_norm)
    last_segment = len(density) - 1

    points = []
    current_x = 0.0
    while current_x <= 1:
        points.append(current_x)
        idx = min(int(np.floor(current_x * (n - 1))), last_segment)
        current_x += 1 / (base_points * density[idx])

    return np.array(points)
