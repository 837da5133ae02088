"""Configuration loader with Pydantic validation for the detection pipeline.

This module provides type-safe configuration loading from YAML files using
Pydantic models for validation and default values. All padding ratios used by
region extraction, validation and rectification live here so that they are
fixed in one place.
"""

import logging
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from qrlocate.preprocessing.operations import parse_step

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"


class RuntimeConfig(BaseModel):
    """Vision runtime configuration.

    Attributes:
        init_timeout_s: Upper bound for the one-time runtime initialization.
    """

    init_timeout_s: float = Field(default=30.0, gt=0.0)


class PreprocessingConfig(BaseModel):
    """Parameters of the preprocessing operators.

    Attributes:
        blur_kernel_size: Gaussian kernel size (odd).
        clahe_clip_limit: CLAHE clip limit.
        clahe_tile_size: CLAHE tile grid size (tiles per side).
        adaptive_block_size: Neighbourhood size for adaptive thresholding (odd).
        adaptive_c: Constant subtracted from the neighbourhood mean.
        morph_kernel_size: Side of the square structuring element.
    """

    blur_kernel_size: int = Field(default=5, ge=1)
    clahe_clip_limit: float = Field(default=2.0, gt=0.0)
    clahe_tile_size: int = Field(default=8, ge=1)
    adaptive_block_size: int = Field(default=11, ge=3)
    adaptive_c: float = 2
    morph_kernel_size: int = Field(default=3, ge=1)

    @field_validator("blur_kernel_size", "adaptive_block_size")
    @classmethod
    def _must_be_odd(cls, v: int) -> int:
        if v % 2 == 0:
            raise ValueError(f"kernel/block size must be odd, got {v}")
        return v


class StrategySpec(BaseModel):
    """A strategy as written in YAML: a name and a list of step tags."""

    name: str
    steps: List[str] = Field(default_factory=list)

    @field_validator("steps")
    @classmethod
    def _steps_must_parse(cls, v: List[str]) -> List[str]:
        for tag in v:
            parse_step(tag)
        return v


class DetectionConfig(BaseModel):
    """Detector engine configuration.

    Attributes:
        min_quad_area: Quads below this area (source px^2) are rejected.
        strategies: Optional replacement for the built-in strategy catalog.
    """

    min_quad_area: float = Field(default=1.0, ge=0.0)
    strategies: Optional[List[StrategySpec]] = None


class RegionConfig(BaseModel):
    """Region extraction configuration."""

    extract_margin_ratio: float = Field(default=0.1, ge=0.0)


class ValidationConfig(BaseModel):
    """Validation oracle configuration.

    Attributes:
        roi_padding_ratio: Padding around the bounding box, as a ratio of its size.
        target_size: Longest side the ROI is upscaled toward.
        enable_rectification: Try a rectified crop when the direct decode fails.
    """

    roi_padding_ratio: float = Field(default=0.3, ge=0.0)
    target_size: int = Field(default=960, ge=1)
    enable_rectification: bool = True


class RectificationConfig(BaseModel):
    """Perspective rectifier configuration."""

    padding_ratio: float = Field(default=0.15, ge=0.0, le=0.5)
    target_size: Optional[int] = Field(default=None, ge=1)
    min_side_length: float = Field(default=1.0, gt=0.0)


class DecodingConfig(BaseModel):
    """Decode waterfall configuration.

    Attributes:
        vendor_scales: Upscale factors for the OpenCV colour-variant stage.
        primary_scales: Upscale factors swept by the primary decoder.
        secondary_scales: Upscale factors swept by the fallback decoder.
        enable_secondary: Whether the fallback decoder is tried at all.
    """

    vendor_scales: List[float] = Field(default_factory=lambda: [1, 2])
    primary_scales: List[float] = Field(default_factory=lambda: [1, 2, 3, 4])
    secondary_scales: List[float] = Field(default_factory=lambda: [1, 2, 3, 4])
    enable_secondary: bool = True

    @field_validator("vendor_scales", "primary_scales", "secondary_scales")
    @classmethod
    def _scales_positive(cls, v: List[float]) -> List[float]:
        if not v:
            raise ValueError("at least one scale is required")
        if any(s <= 0 for s in v):
            raise ValueError(f"scales must be positive, got {v}")
        return v


class Config(BaseModel):
    """Root configuration container."""

    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    region: RegionConfig = Field(default_factory=RegionConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    rectification: RectificationConfig = Field(default_factory=RectificationConfig)
    decoding: DecodingConfig = Field(default_factory=DecodingConfig)


def load_config(config_path: Path) -> Config:
    """Load and validate configuration from a YAML file.

    Args:
        config_path: Path to YAML configuration file.

    Returns:
        Validated Config object.

    Raises:
        FileNotFoundError: If config file does not exist.
        yaml.YAMLError: If YAML parsing fails.
        pydantic.ValidationError: If configuration validation fails.

    Example:
        >>> config = load_config(Path("qrlocate/config.yaml"))
        >>> config.validation.roi_padding_ratio
        0.3
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.debug(f"Loading configuration from {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return Config(**raw)


def get_default_config() -> Config:
    """Get configuration from the bundled config.yaml file.

    Falls back to the model defaults if the bundled file is missing.
    """
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    logger.warning(f"Bundled config not found at {DEFAULT_CONFIG_PATH}, using defaults")
    return Config()
