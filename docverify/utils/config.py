"""Configuration management for the document verification pipeline.

Loads and validates YAML configuration with sensible defaults
for preprocessing, OCR, analysis, and decision thresholds.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class PreprocessingConfig(BaseModel):
    """Configuration for image preparation before OCR."""

    max_width: int = 1200
    max_height: int = 1600
    normalize_enabled: bool = True
    sharpen_enabled: bool = True
    sharpen_sigma: float = 1.0
    sharpen_amount: float = 1.0
    jpeg_quality: int = 95


class OCRConfig(BaseModel):
    """Configuration for Tesseract OCR engine."""

    tesseract_cmd: str | None = None
    languages: str = "fra+eng"
    psm: int = 3
    timeout: float = 0


class AnalysisConfig(BaseModel):
    """Configuration for the autonomous analysis engine."""

    validity_threshold: float = 0.6
    min_pattern_matches: int = 2


class DecisionConfig(BaseModel):
    """Thresholds used by the hybrid decision layer."""

    auto_approve_threshold: float = 0.8
    manual_review_threshold: float = 0.6
    high_priority_threshold: float = 0.3
    version: str = "1.0.0"


class APIConfig(BaseModel):
    """Configuration for the diagnostic HTTP surface."""

    host: str = "0.0.0.0"
    port: int = 8000
    max_upload_bytes: int = 5 * 1024 * 1024


class AppConfig(BaseModel):
    """Top-level application configuration."""

    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    decision: DecisionConfig = Field(default_factory=DecisionConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
