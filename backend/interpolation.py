"""
Interpolation engines
=====================
Five independent interpolators evaluated on a shared query grid:

    linear           piecewise linear between neighbouring knots
    spline           natural cubic spline (second derivative 0 at both ends)
    newton_forward   Newton forward differences, anchored at x[0]
    newton_backward  Newton backward differences, anchored at x[n-1]
    divided          Newton divided differences (unequal spacing)

Every engine takes ascending distinct x, matching y and ascending query
points, and returns an EngineResult. Engines never raise: when their own
preconditions fail they return the fallback sequence [0, 10, 20, ...] with
status 'fallback', so one bad method cannot abort a request. Non-finite
intermediate terms count as zero and no output value is ever NaN/Inf.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Literal

import numpy as np

from backend.config import EPSILON, FALLBACK_STEP

logger = logging.getLogger(__name__)


class DegenerateInputError(ValueError):
    """Input violates an engine's precondition (too few points, zero-width interval)"""


@dataclass
class EngineResult:
    """Output of one engine on one request"""
    method: str
    values: np.ndarray
    status: Literal['ok', 'fallback'] = 'ok'
    reason: str = ''

    @property
    def is_fallback(self) -> bool:
        return self.status == 'fallback'


def fallback_values(length: int) -> np.ndarray:
    return np.arange(length, dtype=float) * FALLBACK_STEP


def _finite_or_zero(values: np.ndarray) -> np.ndarray:
    values = np.asarray(values, dtype=float)
    return np.where(np.isfinite(values), values, 0.0)


def _segment_index(x: np.ndarray, query_x: np.ndarray) -> np.ndarray:
    """Segment start for each query point: the first idx with query <= x[idx], clamped to [0, n-2].

    Between knots this is the segment to the right of the query point, so the
    value comes from that segment's line or cubic. Values at the knots are exact.
    """
    idx = np.searchsorted(x, query_x, side='left')
    return np.clip(idx, 0, len(x) - 2)


def _run_engine(method: str, func: Callable, x, y, query_x) -> EngineResult:
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    query_x = np.asarray(query_x, dtype=float)

    try:
        if len(x) != len(y):
            raise DegenerateInputError(f"x and y lengths differ ({len(x)} != {len(y)})")
        with np.errstate(all='ignore'):
            values = np.asarray(func(x, y, query_x), dtype=float)
        if values.shape != query_x.shape:
            raise DegenerateInputError(
                f"produced {values.size} values for {query_x.size} query points"
            )
    except Exception as e:
        logger.warning("%s interpolation fell back: %s", method, e)
        return EngineResult(method, fallback_values(len(query_x)), 'fallback', str(e))

    return EngineResult(method, _finite_or_zero(values))


# ============================================================================
# LINEAR
# ============================================================================

def _linear(x: np.ndarray, y: np.ndarray, query_x: np.ndarray) -> np.ndarray:
    if len(x) < 2:
        raise DegenerateInputError("Linear interpolation needs at least 2 points")

    idx = _segment_index(x, query_x)
    x0, x1 = x[idx], x[idx + 1]
    width = x1 - x0
    flat = np.abs(width) < EPSILON

    # Zero-width interval: t = 0, i.e. return y[idx]
    t = np.divide(query_x - x0, width, out=np.zeros_like(query_x), where=~flat)
    return y[idx] + t * (y[idx + 1] - y[idx])


def interpolate_linear(x, y, query_x) -> EngineResult:
    """Piecewise linear interpolation; exact at the knots"""
    return _run_engine('linear', _linear, x, y, query_x)


# ============================================================================
# NATURAL CUBIC SPLINE
# ============================================================================

def natural_spline_coefficients(x: np.ndarray, y: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Solve the tridiagonal system for natural cubic spline coefficients.

    Returns (b, c, d) such that on [x[j], x[j+1]]
        S(t) = y[j] + b[j]*dx + c[j]*dx**2 + d[j]*dx**3,  dx = t - x[j].
    b and d have n-1 entries, c has n (c[0] = c[n-1] = 0).
    """
    n = len(x)
    if n < 2:
        raise DegenerateInputError("Insufficient points for spline")

    h = np.diff(x)
    if np.any(np.abs(h) < EPSILON):
        raise DegenerateInputError("Zero interval in spline")

    alpha = np.zeros(n)
    for i in range(1, n - 1):
        alpha[i] = (3 / h[i]) * (y[i + 1] - y[i]) - (3 / h[i - 1]) * (y[i] - y[i - 1])

    # Forward sweep
    l = np.ones(n)
    mu = np.zeros(n)
    z = np.zeros(n)
    for i in range(1, n - 1):
        l[i] = 2 * (x[i + 1] - x[i - 1]) - h[i - 1] * mu[i - 1]
        mu[i] = h[i] / l[i]
        z[i] = (alpha[i] - h[i - 1] * z[i - 1]) / l[i]

    # Back substitution
    c = np.zeros(n)
    b = np.zeros(n - 1)
    d = np.zeros(n - 1)
    for j in range(n - 2, -1, -1):
        c[j] = z[j] - mu[j] * c[j + 1]
        b[j] = (y[j + 1] - y[j]) / h[j] - h[j] * (c[j + 1] + 2 * c[j]) / 3
        d[j] = (c[j + 1] - c[j]) / (3 * h[j])

    return b, c, d


def _spline(x: np.ndarray, y: np.ndarray, query_x: np.ndarray) -> np.ndarray:
    b, c, d = natural_spline_coefficients(x, y)
    j = _segment_index(x, query_x)
    dx = query_x - x[j]
    return y[j] + b[j] * dx + c[j] * dx ** 2 + d[j] * dx ** 3


def interpolate_spline(x, y, query_x) -> EngineResult:
    """Natural cubic spline interpolation"""
    return _run_engine('spline', _spline, x, y, query_x)


# ============================================================================
# NEWTON FORWARD / BACKWARD (equal spacing assumed from the first interval)
# ============================================================================

def difference_table_edges(y: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Leading and trailing diagonals of the finite-difference triangle.

    first[j] = forward difference Δ^j y[0]      (diff[0][j])
    last[j]  = backward difference ∇^j y[n-1]   (diff[n-1][j])

    Columns are built one at a time; entries that overflow count as zero.
    """
    n = len(y)
    first = np.zeros(n)
    last = np.zeros(n)
    column = _finite_or_zero(y)
    first[0], last[0] = column[0], column[-1]
    for j in range(1, n):
        column = _finite_or_zero(column[1:] - column[:-1])
        first[j], last[j] = column[0], column[-1]
    return first, last


def _step_size(x: np.ndarray) -> float:
    h = x[1] - x[0]
    if abs(h) < EPSILON:
        raise DegenerateInputError("Zero step between the first two knots")
    return h


def _accumulate(values: np.ndarray, u: np.ndarray, coefficients: np.ndarray, shift: int) -> np.ndarray:
    """Add Σ_j [Π_k (u + shift*k) / j!] * coefficients[j] to values.

    shift = -1 gives the forward series (u)(u-1)...; shift = +1 the backward
    series (u)(u+1)...
    """
    term = np.ones_like(u)
    for j in range(1, len(coefficients)):
        term = term * (u + shift * (j - 1)) / j
        values = values + _finite_or_zero(term * coefficients[j])
        live = np.isfinite(term) & (term != 0)
        if not live.any():
            break
    return values


def _newton_forward(x: np.ndarray, y: np.ndarray, query_x: np.ndarray) -> np.ndarray:
    n = len(x)
    if n == 0:
        raise DegenerateInputError("Newton forward needs at least 1 point")

    first, _ = difference_table_edges(y)
    u = (query_x - x[0]) / _step_size(x) if n > 1 else np.zeros_like(query_x)
    values = np.full_like(query_x, first[0])
    return _accumulate(values, u, first, shift=-1)


def interpolate_newton_forward(x, y, query_x) -> EngineResult:
    """Newton forward-difference interpolation, most accurate near x[0]"""
    return _run_engine('newton_forward', _newton_forward, x, y, query_x)


def _newton_backward(x: np.ndarray, y: np.ndarray, query_x: np.ndarray) -> np.ndarray:
    n = len(x)
    if n == 0:
        raise DegenerateInputError("Newton backward needs at least 1 point")

    _, last = difference_table_edges(y)
    u = (query_x - x[n - 1]) / _step_size(x) if n > 1 else np.zeros_like(query_x)
    values = np.full_like(query_x, last[0])
    return _accumulate(values, u, last, shift=1)


def interpolate_newton_backward(x, y, query_x) -> EngineResult:
    """Newton backward-difference interpolation, most accurate near x[n-1]"""
    return _run_engine('newton_backward', _newton_backward, x, y, query_x)


# ============================================================================
# NEWTON DIVIDED DIFFERENCES
# ============================================================================

def divided_difference_coefficients(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """Top row of the divided-difference triangle, f[x0], f[x0,x1], ..."""
    n = len(x)
    coefficients = np.zeros(n)
    column = _finite_or_zero(y)
    coefficients[0] = column[0]
    for j in range(1, n):
        widths = x[j:] - x[:-j]  # x[i+j] - x[i]
        if np.any(np.abs(widths) < EPSILON):
            raise DegenerateInputError("Duplicate x values")
        column = _finite_or_zero((column[1:] - column[:-1]) / widths)
        coefficients[j] = column[0]
    return coefficients


def _divided(x: np.ndarray, y: np.ndarray, query_x: np.ndarray) -> np.ndarray:
    if len(x) == 0:
        raise DegenerateInputError("Divided differences need at least 1 point")

    coefficients = divided_difference_coefficients(x, y)
    values = np.full_like(query_x, coefficients[0])
    term = np.ones_like(query_x)
    for j in range(1, len(x)):
        term = term * (query_x - x[j - 1])
        values = values + _finite_or_zero(term * coefficients[j])
    return values


def interpolate_divided(x, y, query_x) -> EngineResult:
    """Newton divided-difference interpolation, valid for unequal spacing"""
    return _run_engine('divided', _divided, x, y, query_x)


# ============================================================================
# METHOD REGISTRY
# ============================================================================

# Declaration order is the tie-break order for the recommendation
METHODS: tuple[tuple[str, Callable[..., EngineResult]], ...] = (
    ('linear', interpolate_linear),
    ('spline', interpolate_spline),
    ('newton_forward', interpolate_newton_forward),
    ('newton_backward', interpolate_newton_backward),
    ('divided', interpolate_divided),
)

METHOD_DESCRIPTIONS = {
    'linear': 'Straight lines between neighbouring points',
    'spline': 'Natural cubic spline with zero curvature at both ends',
    'newton_forward': 'Newton forward differences, best near the start of the data',
    'newton_backward': 'Newton backward differences, best near the end of the data',
    'divided': 'Newton divided differences, handles unequal spacing',
}


def display_name(method: str) -> str:
    """'newton_forward' -> 'Newton forward'"""
    return method[:1].upper() + method[1:].replace('_', ' ')


def run_all(x, y, query_x) -> dict[str, EngineResult]:
    """Evaluate every registered method on the same grid, in declaration order"""
    return {method: func(x, y, query_x) for method, func in METHODS}
