"""
Error scoring and method recommendation
"""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from sklearn.metrics import mean_squared_error

from backend.config import SMOOTHNESS_WEIGHT


@dataclass(frozen=True)
class ErrorEntry:
    """Score of one method; `mse` is the smoothness-penalized value used for ranking"""
    method: str
    mse: float
    raw_mse: float
    smoothness: float


def nearest_point_mse(x_ref, y_ref, x_interp, y_interp) -> float:
    """MSE between reference points and the closest grid point to each.

    No interpolation: each reference x is matched to the nearest x in the
    grid (first one on ties). Returns inf when there is nothing to compare.
    """
    x_ref = np.asarray(x_ref, dtype=float)
    y_ref = np.asarray(y_ref, dtype=float)
    x_interp = np.asarray(x_interp, dtype=float)
    y_interp = np.asarray(y_interp, dtype=float)

    if len(x_ref) != len(y_ref) or len(x_interp) != len(y_interp):
        raise ValueError("Input arrays must have the same length")
    if len(x_ref) == 0 or len(x_interp) == 0:
        return float('inf')

    closest = np.array([np.argmin(np.abs(x_interp - x)) for x in x_ref])
    matched = y_interp[closest]
    if not np.all(np.isfinite(matched)):
        return float('inf')
    with np.errstate(over='ignore', invalid='ignore'):
        mse = mean_squared_error(y_ref, matched)
    return float(mse) if np.isfinite(mse) else float('inf')


def smoothness(values) -> float:
    """Mean of 1 / (1 + |second difference|); 1.0 for fewer than 3 points"""
    values = np.asarray(values, dtype=float)
    if len(values) < 3:
        return 1.0
    with np.errstate(over='ignore', invalid='ignore'):
        second = np.abs(np.diff(values, n=2))
        score = np.mean(1 / (1 + second))
    return float(score) if np.isfinite(score) else 0.0


def penalized_mse(mse: float, smooth: float, weight: float = SMOOTHNESS_WEIGHT) -> float:
    """Rougher curves get up to `weight` (10%) added to their MSE"""
    return mse * (1 + weight * (1 - smooth))


def score_method(method: str, x_ref, y_ref, x_interp, y_interp) -> ErrorEntry:
    raw = nearest_point_mse(x_ref, y_ref, x_interp, y_interp)
    smooth = smoothness(y_interp)
    return ErrorEntry(method=method, mse=penalized_mse(raw, smooth), raw_mse=raw, smoothness=smooth)


def rank_methods(entries: list[ErrorEntry]) -> list[ErrorEntry]:
    """Ascending by penalized MSE. Stable, so ties keep the input order."""
    return sorted(entries, key=lambda e: e.mse)


def recommend(entries: list[ErrorEntry]) -> ErrorEntry:
    """First entry with the minimum penalized MSE"""
    if not entries:
        raise ValueError("No methods to recommend from")
    return rank_methods(entries)[0]
