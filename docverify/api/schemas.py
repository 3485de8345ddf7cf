"""Pydantic response schemas for the diagnostic endpoints."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    tesseract_available: bool
    autonomous_ready: bool


class PerformanceStats(BaseModel):
    """Usage rates of the running verifier."""

    totalAnalyses: int
    autonomousSuccessRate: str
    manualReviewRate: str
    avgCostPerAnalysis: str


class StatsResponse(BaseModel):
    """Response schema for the statistics endpoint."""

    available: bool
    stats: PerformanceStats | None = None
    version: str | None = None
    providers: list[str] = []
    capabilities: list[str] = []
