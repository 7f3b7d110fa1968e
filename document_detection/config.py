"""
Tuning parameters for detection and quality evaluation.

Every threshold lives here so that per-device tuning is data rather than
code. Values can be overridden from the environment (or a .env file):

    DOCDETECT_MIN_AREA_RATIO=0.03
    DOCDETECT_SUBPIX_WINDOW=7,7
    DOCQUALITY_MIN_AREA_RATIO=0.1
"""

import os
from dataclasses import dataclass, fields, replace
from typing import Optional, Tuple

from dotenv import load_dotenv

CONFIG_VERSION = 1

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _parse(raw: str, default):
    """Convert an environment string to the type of a field default."""
    raw = raw.strip()
    if isinstance(default, bool):
        value = raw.lower()
        if value in _TRUE:
            return True
        if value in _FALSE:
            return False
        raise ValueError(f"Not a boolean: {raw!r}")
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    if isinstance(default, tuple):
        return tuple(type(default[0])(part.strip()) for part in raw.split(","))
    return raw


def _overrides_from_env(cls, prefix: str, dotenv_path: Optional[str]) -> dict:
    load_dotenv(dotenv_path)
    overrides = {}
    for f in fields(cls):
        raw = os.getenv(prefix + f.name.upper())
        if raw is not None:
            overrides[f.name] = _parse(raw, f.default)
    return overrides


@dataclass(frozen=True)
class DetectionConfig:
    """
    Parameters of the preprocessing, edge, contour and corner stages.

    Args:
        clahe_clip_limit: Contrast limit for local histogram equalization
        clahe_tile_grid: CLAHE tile grid (columns, rows)
        blur_kernel: Gaussian blur kernel size (odd)
        canny_sigma: Spread around the median used for Canny thresholds
        canny_low_floor: Minimum Canny low threshold
        canny_high_floor: Minimum Canny high threshold
        morph_kernel: Size of the rectangular closing kernel
        use_adaptive_fallback: Retry with adaptive thresholding when Canny finds nothing
        adaptive_block_size: Neighbourhood of the adaptive threshold (odd, >= 3)
        adaptive_c: Constant subtracted from the local mean
        adaptive_dilate_iterations: Dilations of the adaptive map before closing
        min_area_floor: Absolute minimum contour area in pixels
        min_area_ratio: Minimum contour area as ratio of the frame
        max_area_ratio: Maximum contour area as ratio of the frame
        approx_epsilon: Polygon approximation epsilon (ratio of perimeter)
        approx_epsilon_relaxed: Second, looser epsilon when the first is not a quad
        min_rectangularity: Required rectangularity for convex quads
        fallback_min_rectangularity: Required rectangularity for rotated boxes
        min_edge_floor: Absolute minimum edge length in pixels
        min_edge_ratio: Minimum edge length as ratio of the frame's short side
        min_aspect: Minimum width/height ratio of a candidate
        max_aspect: Maximum width/height ratio of a candidate
        refine_corners: Run sub-pixel corner refinement
        subpix_window: Half size of the cornerSubPix search window
        subpix_max_iter: Iteration limit of the refinement
        subpix_epsilon: Convergence epsilon of the refinement
        subpix_max_shift: Refined corners moving further than this are discarded
    """
    version: int = CONFIG_VERSION

    clahe_clip_limit: float = 2.5
    clahe_tile_grid: Tuple[int, int] = (8, 8)
    blur_kernel: int = 5

    canny_sigma: float = 0.33
    canny_low_floor: float = 50.0
    canny_high_floor: float = 150.0
    morph_kernel: int = 3
    use_adaptive_fallback: bool = True
    adaptive_block_size: int = 15
    adaptive_c: float = 2.0
    adaptive_dilate_iterations: int = 1

    min_area_floor: float = 350.0
    min_area_ratio: float = 0.02
    max_area_ratio: float = 0.85
    approx_epsilon: float = 0.01
    approx_epsilon_relaxed: float = 0.02
    min_rectangularity: float = 0.7
    fallback_min_rectangularity: float = 0.5
    min_edge_floor: float = 60.0
    min_edge_ratio: float = 0.08
    min_aspect: float = 0.45
    max_aspect: float = 2.8

    refine_corners: bool = True
    subpix_window: Tuple[int, int] = (11, 11)
    subpix_max_iter: int = 40
    subpix_epsilon: float = 0.001
    subpix_max_shift: float = 50.0

    def validate(self) -> "DetectionConfig":
        if self.version != CONFIG_VERSION:
            raise ValueError(f"Unsupported config version {self.version}, expected {CONFIG_VERSION}")
        if self.blur_kernel < 1 or self.blur_kernel % 2 == 0:
            raise ValueError(f"blur_kernel must be a positive odd number, got {self.blur_kernel}")
        if self.adaptive_block_size < 3 or self.adaptive_block_size % 2 == 0:
            raise ValueError(f"adaptive_block_size must be odd and >= 3, got {self.adaptive_block_size}")
        if self.adaptive_dilate_iterations < 0:
            raise ValueError(f"adaptive_dilate_iterations must not be negative, got {self.adaptive_dilate_iterations}")
        if self.morph_kernel < 1:
            raise ValueError(f"morph_kernel must be positive, got {self.morph_kernel}")
        if self.clahe_clip_limit <= 0:
            raise ValueError(f"clahe_clip_limit must be positive, got {self.clahe_clip_limit}")
        if not 0 <= self.min_area_ratio < self.max_area_ratio <= 1:
            raise ValueError("Area ratios must satisfy 0 <= min_area_ratio < max_area_ratio <= 1")
        if not 0 < self.min_aspect < self.max_aspect:
            raise ValueError("Aspect bounds must satisfy 0 < min_aspect < max_aspect")
        if self.approx_epsilon <= 0 or self.approx_epsilon_relaxed <= 0:
            raise ValueError("Approximation epsilons must be positive")
        if len(self.clahe_tile_grid) != 2 or len(self.subpix_window) != 2:
            raise ValueError("clahe_tile_grid and subpix_window need two values")
        return self

    def with_overrides(self, **overrides) -> "DetectionConfig":
        """Copy of this config with some fields replaced, validated."""
        return replace(self, **overrides).validate()

    @classmethod
    def from_env(cls, prefix: str = "DOCDETECT_", dotenv_path: Optional[str] = None) -> "DetectionConfig":
        """Defaults overridden by `<prefix><FIELD>` environment variables."""
        return cls(**_overrides_from_env(cls, prefix, dotenv_path)).validate()


@dataclass(frozen=True)
class QualityConfig:
    """
    Policy constants of the quality verdict.

    Image-space rule (absolute pixels):
        image_angle_threshold: Max misalignment of opposing corners
        image_margin: Max distance of top/bottom corners from the frame edges

    View-space rule (ratios, resolution independent):
        min_area_ratio / max_area_ratio: Accepted share of the viewport
        max_skew_ratio: Max |perpendicular delta| / edge length per edge
        min_edge_ratio / max_edge_ratio: Accepted opposite-edge length ratio
    """
    image_angle_threshold: float = 100.0
    image_margin: float = 150.0

    min_area_ratio: float = 0.06
    max_area_ratio: float = 0.95
    max_skew_ratio: float = 0.3
    min_edge_ratio: float = 0.33
    max_edge_ratio: float = 3.0

    def validate(self) -> "QualityConfig":
        if self.image_angle_threshold <= 0 or self.image_margin < 0:
            raise ValueError("Image-space thresholds must be positive")
        if not 0 <= self.min_area_ratio < self.max_area_ratio:
            raise ValueError("Area ratios must satisfy 0 <= min_area_ratio < max_area_ratio")
        if not 0 < self.min_edge_ratio < self.max_edge_ratio:
            raise ValueError("Edge ratios must satisfy 0 < min_edge_ratio < max_edge_ratio")
        if self.max_skew_ratio <= 0:
            raise ValueError("max_skew_ratio must be positive")
        return self

    def with_overrides(self, **overrides) -> "QualityConfig":
        return replace(self, **overrides).validate()

    @classmethod
    def from_env(cls, prefix: str = "DOCQUALITY_", dotenv_path: Optional[str] = None) -> "QualityConfig":
        return cls(**_overrides_from_env(cls, prefix, dotenv_path)).validate()
