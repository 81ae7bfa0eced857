"""
Data preprocessing: cleaning and normalization of (x, y) samples
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from backend.config import IQR_FACTOR

logger = logging.getLogger(__name__)


class InsufficientDataError(ValueError):
    """Raised when fewer than two usable points remain"""


@dataclass(frozen=True)
class Series:
    """Cleaned samples: strictly increasing x, finite values"""
    x: np.ndarray
    y: np.ndarray

    def __len__(self) -> int:
        return len(self.x)


@dataclass(frozen=True)
class NormalizationParams:
    """Min/max/range of one axis, used to map into [0, 1] and back"""
    min: float
    max: float
    range: float


# ============================================================================
# CLEANER
# ============================================================================

def remove_outliers(values: np.ndarray, factor: float = IQR_FACTOR) -> np.ndarray:
    """Replace values outside [Q1 - k*IQR, Q3 + k*IQR] with NaN.

    Quartiles use linear interpolation between order statistics and are taken
    over the finite values only. Non-finite input stays NaN.
    """
    values = np.asarray(values, dtype=float)
    result = np.where(np.isfinite(values), values, np.nan)
    finite = result[np.isfinite(result)]
    if finite.size == 0:
        return result

    q1, q3 = np.quantile(finite, [0.25, 0.75])
    iqr = q3 - q1
    low, high = q1 - factor * iqr, q3 + factor * iqr

    outliers = (result < low) | (result > high)
    if np.any(outliers):
        logger.debug("Removed %d outlier(s) outside [%g, %g]", int(outliers.sum()), low, high)
    result[outliers] = np.nan
    return result


def pair_and_sort(x: np.ndarray, y: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Drop pairs with a missing member and sort by x"""
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    keep = np.isfinite(x) & np.isfinite(y)
    x, y = x[keep], y[keep]
    order = np.argsort(x, kind='stable')
    return x[order], y[order]


def average_duplicates(x: np.ndarray, y: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Collapse repeated x values into one point with the mean y"""
    unique_x, inverse, counts = np.unique(x, return_inverse=True, return_counts=True)
    if len(unique_x) == len(x):
        return x, y
    sums = np.zeros(len(unique_x))
    np.add.at(sums, inverse, y)
    logger.debug("Averaged %d duplicate x value(s)", len(x) - len(unique_x))
    return unique_x, sums / counts


def clean_series(x, y) -> Series:
    """Remove outliers, invalid pairs and duplicates; return a sorted Series.

    Raises:
        InsufficientDataError: fewer than 2 points survive any stage
    """
    x = np.asarray(x, dtype=float).ravel()
    y = np.asarray(y, dtype=float).ravel()
    if len(x) != len(y):
        raise ValueError(f"x and y must have the same length ({len(x)} != {len(y)})")

    y_checked = remove_outliers(y)
    x_sorted, y_sorted = pair_and_sort(x, y_checked)
    if len(x_sorted) < 2:
        raise InsufficientDataError(
            f"Insufficient valid data points after cleaning ({len(x_sorted)} found)"
        )

    x_unique, y_unique = average_duplicates(x_sorted, y_sorted)
    if len(x_unique) < 2:
        raise InsufficientDataError(
            f"Insufficient valid data points after deduplication ({len(x_unique)} found)"
        )

    return Series(x=x_unique, y=y_unique)


# ============================================================================
# NORMALIZER
# ============================================================================

def normalize(values) -> tuple[np.ndarray, NormalizationParams]:
    """Map values to [0, 1]; identity when all values are equal.

    Raises:
        InsufficientDataError: max - min overflows a float
    """
    values = np.asarray(values, dtype=float)
    v_min = float(np.min(values))
    v_max = float(np.max(values))
    v_range = v_max - v_min
    if not np.isfinite(v_range):
        raise InsufficientDataError(
            f"Value range [{v_min:g}, {v_max:g}] is too wide to normalize"
        )
    params = NormalizationParams(min=v_min, max=v_max, range=v_range)
    if v_range == 0:
        return values.copy(), params
    return (values - v_min) / v_range, params


def denormalize(normalized, v_min: float, v_range: float) -> np.ndarray:
    return np.asarray(normalized, dtype=float) * v_range + v_min
