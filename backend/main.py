"""
Interpolation Lab - Backend API
FastAPI server comparing interpolation methods on uploaded (x, y) data
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend import __version__
from backend.config import (
    ALLOWED_CONTENT_TYPES,
    ALLOWED_ORIGINS,
    HOST,
    LOG_FILE,
    LOG_LEVEL,
    MAX_FILE_SIZE,
    PORT,
    UPLOAD_FIELD,
)
from backend.interpolation import METHOD_DESCRIPTIONS, METHODS, display_name
from backend.logging_config import setup_logging
from backend.parsing import decode_payload, parse_delimited
from backend.pipeline import analyze
from backend.preprocessing import InsufficientDataError

setup_logging(LOG_LEVEL, LOG_FILE)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Interpolation Lab API",
    description="Backend for comparing interpolation methods on tabular (x, y) data",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
)


# Pydantic models
class Point(BaseModel):
    x: float
    y: float


class InterpolateRequest(BaseModel):
    points: list[Point]


class InterpolatedCurves(BaseModel):
    x: list[float]
    linear: list[float]
    spline: list[float]
    newton_forward: list[float]
    newton_backward: list[float]
    divided: list[float]


class MethodError(BaseModel):
    method: str
    mse: Optional[float] = None  # None when the score is not finite


class DataSeries(BaseModel):
    x: list[float]
    y: list[float]


class AxisRange(BaseModel):
    min: float
    max: float


class DataRange(BaseModel):
    x: AxisRange
    y: AxisRange


class AnalysisMetadata(BaseModel):
    pointCount: int
    dataRange: DataRange
    fallbackMethods: list[str] = []
    elapsedMs: Optional[float] = None


class InterpolationResponse(BaseModel):
    interpolated: InterpolatedCurves
    errors: list[MethodError]
    recommendation: MethodError
    originalData: DataSeries
    metadata: AnalysisMetadata


class MethodInfo(BaseModel):
    methodId: str
    displayName: str
    description: str


class MethodsResponse(BaseModel):
    methods: list[MethodInfo]


# ============================================================================
# ERROR RESPONSES
# ============================================================================

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    messages = [
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    ]
    return JSONResponse(status_code=422, content={"error": "; ".join(messages) or "Invalid request"})


def run_analysis(x, y) -> dict:
    """Run the pipeline, translating failures into HTTP errors"""
    try:
        result = analyze(x, y)
    except InsufficientDataError as e:
        logger.info("Rejected dataset: %s", e)
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception("Error processing request")
        raise HTTPException(status_code=500, detail="Internal server error")

    return result.to_payload()


# ============================================================================
# ROUTES
# ============================================================================

@app.get("/")
def root():
    return {"status": "ok", "message": "Interpolation Lab API"}


@app.get("/health")
def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/methods", response_model=MethodsResponse)
def get_methods():
    """Return the interpolation methods in ranking tie-break order"""
    methods = [
        MethodInfo(
            methodId=method,
            displayName=display_name(method),
            description=METHOD_DESCRIPTIONS.get(method, ''),
        )
        for method, _ in METHODS
    ]
    return MethodsResponse(methods=methods)


@app.post("/api/interpolate", response_model=InterpolationResponse)
def interpolate_upload(upload: Optional[UploadFile] = File(None, alias=UPLOAD_FIELD)):
    """Interpolate a single uploaded CSV file with `x` and `y` columns"""
    if upload is None:
        raise HTTPException(status_code=400, detail="No file uploaded")

    content_type = (upload.content_type or '').split(';')[0].strip().lower()
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(status_code=415, detail="Only CSV files are allowed")

    # Read one byte past the limit to detect oversized uploads
    raw = upload.file.read(MAX_FILE_SIZE + 1)
    if len(raw) > MAX_FILE_SIZE:
        raise HTTPException(
            status_code=413,
            detail=f"File too large (limit is {MAX_FILE_SIZE} bytes)"
        )

    logger.info("Received %s (%d bytes)", upload.filename, len(raw))

    try:
        x, y = parse_delimited(decode_payload(raw))
    except InsufficientDataError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return run_analysis(x, y)


@app.post("/api/interpolate/json", response_model=InterpolationResponse)
def interpolate_points(request: InterpolateRequest):
    """Interpolate an already-parsed list of points"""
    if len(request.points) < 2:
        raise HTTPException(
            status_code=400,
            detail=f"No valid data or insufficient points ({len(request.points)} found)"
        )

    x = [p.x for p in request.points]
    y = [p.y for p in request.points]
    return run_analysis(x, y)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=HOST, port=PORT)
