# services/api/app.py
from __future__ import annotations

import logging
import os
import time
import uuid
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response
from mangum import Mangum
from pydantic import BaseModel, Field

from services.common.results import artifact_bytes, artifact_content_type, build_results_payload
from services.workers.profiling import MalformedInputError, ProfilingResult, run_pipeline

# ---- Env ----
MAX_ROWS = int(os.environ.get("DATASETLENS_MAX_ROWS", "50000"))   # upstream input ceiling
LOG_LEVEL = os.environ.get("DATASETLENS_LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get(
        "DATASETLENS_CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
    ).split(",")
    if origin.strip()
]

# ---- Logging ----
logger = logging.getLogger("datasetlens.api")
if not logger.handlers:
    logging.basicConfig(level=LOG_LEVEL)
logger.setLevel(LOG_LEVEL)

# ---- App ----
app = FastAPI(title="DatasetLens API")

# --- CORS for the dashboard ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["*"],
    allow_credentials=False,
)


# ---- Models ----
class ProfileRequest(BaseModel):
    """Decoded rows submitted for profiling."""
    name: Optional[str] = None
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    include_phases: bool = False


# ---- Helpers ----
def run_profile(body: ProfileRequest) -> ProfilingResult:
    if len(body.rows) > MAX_ROWS:
        raise HTTPException(
            status_code=413,
            detail=f"dataset has {len(body.rows)} rows; the limit is {MAX_ROWS}",
        )
    try:
        return run_pipeline(body.rows, dataset_name=body.name)
    except MalformedInputError as exc:
        logger.warning("rejected malformed rows", extra={"row_index": exc.row_index})
        raise HTTPException(status_code=422, detail=str(exc)) from exc


def artifact_response(result: ProfilingResult, relative_key: str) -> Response:
    spec = result.artifact_contents.get(relative_key)
    if spec is None:
        raise HTTPException(status_code=404, detail="Artifact not available for this dataset")
    return Response(
        content=artifact_bytes(spec),
        media_type=artifact_content_type(relative_key, spec),
    )


# ---- Routes ----
@app.get("/health")
def health():
    return {"ok": True}


@app.post("/profile")
def create_profile(body: ProfileRequest):
    result = run_profile(body)
    logger.info(
        "dataset profiled",
        extra={"rows": result.profile.row_count, "columns": result.profile.column_count},
    )
    return build_results_payload(result, dataset_name=body.name, include_phases=body.include_phases)


@app.post("/profile/statistics.csv")
def profile_statistics_csv(body: ProfileRequest):
    result = run_profile(body)
    return artifact_response(result, "results/statistics.csv")


@app.post("/profile/report", response_class=HTMLResponse)
def profile_report(body: ProfileRequest):
    result = run_profile(body)
    return HTMLResponse(content=result.report_html)


# ---- Error handlers ----
@app.exception_handler(RequestValidationError)
async def invalid_body(request: Request, exc: RequestValidationError):
    # 422 is reserved for rows that decode but disagree on their columns
    logger.warning("rejected invalid request body", extra={"path": request.url.path})
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request body", "errors": jsonable_encoder(exc.errors())},
    )


# ---- Middleware ----
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    try:
        response = await call_next(request)
        duration_ms = int((time.time() - start) * 1000)
        logger.info(
            "request completed",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
                "request_id": request_id,
            },
        )
        response.headers.setdefault("x-request-id", request_id)
        return response
    except Exception:
        duration_ms = int((time.time() - start) * 1000)
        logger.exception(
            "request failed",
            extra={
                "path": request.url.path,
                "method": request.method,
                "request_id": request_id,
                "duration_ms": duration_ms,
            },
        )
        raise


# Lambda entrypoint (module scope for the runtime)
handler = Mangum(app)
