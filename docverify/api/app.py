"""FastAPI application exposing the verification pipeline for diagnostics.

Provides a health check, a one-shot document analysis endpoint and the
running statistics of the shared verifier instance.
"""

import shutil
import threading
from typing import Annotated, Any

from fastapi import FastAPI, File, HTTPException, UploadFile

from docverify.decision.orchestrator import (
    CAPABILITIES,
    HybridDocumentVerifier,
    Provider,
)
from docverify.utils.config import load_config
from docverify.utils.logger import get_logger

from .schemas import HealthResponse, PerformanceStats, StatsResponse

logger = get_logger(__name__)

app = FastAPI(
    title="Identity Document Verification API",
    description="Classify identity document photos and route them to review",
    version="1.0.0",
)

_ALLOWED_CONTENT_TYPES = {
    "image/png",
    "image/jpeg",
    "image/jpg",
}

_verifier: HybridDocumentVerifier | None = None
_ready: bool = False
_verifier_lock = threading.Lock()


def get_verifier() -> HybridDocumentVerifier:
    """Return the process-wide verifier, initializing it on first use."""
    global _verifier, _ready
    with _verifier_lock:
        if _verifier is None:
            verifier = HybridDocumentVerifier(load_config())
            _ready = verifier.initialize()["autonomousReady"]
            _verifier = verifier
        return _verifier


@app.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return system health status."""
    verifier = get_verifier()
    return HealthResponse(
        status="healthy",
        version=verifier.thresholds.version,
        tesseract_available=shutil.which("tesseract") is not None,
        autonomous_ready=_ready,
    )


@app.post("/analyze")
def analyze_document(file: Annotated[UploadFile, File(...)]) -> dict[str, Any]:
    """Analyze an uploaded identity document photo.

    Args:
        file: Uploaded image (PNG or JPEG).

    Returns:
        The verdict, flattened to JSON.
    """
    if file.content_type and file.content_type not in _ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {file.content_type}",
        )

    verifier = get_verifier()
    content = file.file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Empty upload")
    if len(content) > verifier.config.api.max_upload_bytes:
        raise HTTPException(status_code=400, detail="Document exceeds size limit")

    result = verifier.analyze_document(
        content,
        {"originalName": file.filename, "fileType": file.content_type},
    )
    logger.info(
        "Analyzed %s: %s, confidence %.2f",
        file.filename,
        result.provider,
        result.confidence,
    )
    return result.to_dict()


@app.get("/stats", response_model=StatsResponse)
def performance_stats() -> StatsResponse:
    """Return usage statistics of the shared verifier."""
    verifier = get_verifier()
    if not _ready:
        return StatsResponse(available=False)

    stats = verifier.get_performance_stats()
    return StatsResponse(
        available=True,
        stats=PerformanceStats(**stats) if stats else None,
        version=verifier.thresholds.version,
        providers=[Provider.AUTONOMOUS.value],
        capabilities=CAPABILITIES,
    )
