"""
Interpolation analysis pipeline
===============================
raw (x, y) -> clean -> normalize -> adaptive grid -> five engines
-> denormalize -> score -> response payload

One call is one self-contained computation; nothing is kept between calls.
"""
from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass

import numpy as np

from backend.interpolation import EngineResult, display_name, run_all
from backend.preprocessing import (
    InsufficientDataError,
    NormalizationParams,
    Series,
    clean_series,
    denormalize,
    normalize,
)
from backend.sampling import adaptive_grid
from backend.scoring import ErrorEntry, rank_methods, score_method

logger = logging.getLogger(__name__)


def _json_float(value: float) -> float | None:
    return float(value) if math.isfinite(value) else None


@dataclass
class AnalysisResult:
    """Everything produced for one dataset"""
    grid: np.ndarray  # denormalized query x
    interpolated: dict[str, np.ndarray]
    engine_results: dict[str, EngineResult]
    errors: list[ErrorEntry]
    recommendation: ErrorEntry
    series: Series
    x_params: NormalizationParams
    y_params: NormalizationParams
    total_time_ms: float = 0.0

    @property
    def fallback_methods(self) -> list[str]:
        return [method for method, result in self.engine_results.items() if result.is_fallback]

    def to_payload(self) -> dict:
        """Render as the JSON-shaped response"""
        interpolated = {'x': self.grid.tolist()}
        for method, values in self.interpolated.items():
            interpolated[method] = values.tolist()

        return {
            'interpolated': interpolated,
            'errors': [
                {'method': display_name(entry.method), 'mse': _json_float(entry.mse)}
                for entry in self.errors
            ],
            'recommendation': {
                'method': display_name(self.recommendation.method),
                'mse': _json_float(self.recommendation.mse),
            },
            'originalData': {
                'x': self.series.x.tolist(),
                'y': self.series.y.tolist(),
            },
            'metadata': {
                'pointCount': len(self.grid),
                'dataRange': {
                    'x': {'min': self.x_params.min, 'max': self.x_params.max},
                    'y': {'min': self.y_params.min, 'max': self.y_params.max},
                },
                'fallbackMethods': [display_name(m) for m in self.fallback_methods],
                'elapsedMs': round(self.total_time_ms, 3),
            },
        }


def analyze(x, y) -> AnalysisResult:
    """Run the full pipeline on raw x, y values.

    Raises:
        InsufficientDataError: fewer than 2 usable points after cleaning, or a
            value range too wide to normalize
    """
    start_time = time.time()
    series = clean_series(x, y)

    x_norm, x_params = normalize(series.x)
    y_norm, y_params = normalize(series.y)

    grid_norm = adaptive_grid(x_norm, y_norm)
    engine_results = run_all(x_norm, y_norm, grid_norm)

    interpolated = {
        method: denormalize(result.values, y_params.min, y_params.range)
        for method, result in engine_results.items()
    }
    grid = denormalize(grid_norm, x_params.min, x_params.range)
    if not np.all(np.isfinite(grid)):
        raise InsufficientDataError("x values cannot be resampled to a finite grid")

    entries = [
        score_method(method, series.x, series.y, grid, values)
        for method, values in interpolated.items()
    ]
    errors = rank_methods(entries)

    total_time_ms = (time.time() - start_time) * 1000
    logger.info(
        "Analyzed %d point(s) on a %d-point grid in %.0fms; best: %s (mse=%.6g)",
        len(series), len(grid), total_time_ms, errors[0].method, errors[0].mse,
    )

    return AnalysisResult(
        grid=grid,
        interpolated=interpolated,
        engine_results=engine_results,
        errors=errors,
        recommendation=errors[0],
        series=series,
        x_params=x_params,
        y_params=y_params,
        total_time_ms=total_time_ms,
    )
