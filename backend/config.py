"""
Configuration
=============
Server settings and numerical constants for the interpolation backend.

Server settings are read once from environment variables at import time;
everything else is a plain module constant.

Exports:
    HOST, PORT (str, int): Bind address for uvicorn.
    MAX_FILE_SIZE (int): Upload limit in bytes.
    ALLOWED_ORIGINS (list[str]): CORS origins.
    LOG_LEVEL, LOG_FILE: Logging setup, see logging_config.py.
"""
from __future__ import annotations

import os


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer, got {raw!r}")


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.environ.get(name)
    if not raw:
        return default
    return [item.strip() for item in raw.split(',') if item.strip()]


# Server
HOST: str = os.environ.get('HOST', '0.0.0.0')
PORT: int = _env_int('PORT', 5001)
MAX_FILE_SIZE: int = _env_int('MAX_FILE_SIZE', 5 * 1024 * 1024)  # 5MB
ALLOWED_ORIGINS: list[str] = _env_list(
    'ALLOWED_ORIGINS', ['http://localhost:3000', 'http://localhost:5000']
)
ALLOWED_CONTENT_TYPES: tuple[str, ...] = (
    'text/csv',
    'application/vnd.ms-excel',
    'text/plain',
    'application/octet-stream',
)
UPLOAD_FIELD: str = 'csvFile'

# Logging
LOG_LEVEL: str = os.environ.get('LOG_LEVEL', 'INFO').upper()
LOG_FILE: str | None = os.environ.get('LOG_FILE') or None

# Parsing
DELIMITERS: tuple[str, ...] = (',', ';', '\t')

# Numerical pipeline
IQR_FACTOR = 1.5
MAX_BASE_POINTS = 2000
POINTS_PER_SAMPLE = 20
MAX_DENSITY_BOOST = 4  # steepest segment gets 1 + 4 = 5x the base density
SMOOTHNESS_WEIGHT = 0.1
EPSILON = 1e-10
FALLBACK_STEP = 10
