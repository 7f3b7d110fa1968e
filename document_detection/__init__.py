"""
Document Detection Module

Finds the four corners of a paper document in camera frames and photos,
judges whether the framing is good enough for capture and crops the
document with perspective correction, using OpenCV.
"""

from .bounds import RegionOfInterest
from .config import DetectionConfig, QualityConfig
from .detector import (
    DocumentDetector,
    detect,
    detect_in_yuv,
    evaluate_quality,
    map_coordinates,
    warp_and_crop,
)
from .mapping import MappingParams, ScaleMode
from .processing import ProcessedCapture, apply_color_controls, process_capture
from .quality import QualityEvaluator, ReferenceSpace
from .stability import RectangleSmoother, StabilizerState, TemporalStabilizer
from .types import (
    CoordinateSpace,
    DetectionResult,
    EdgePass,
    Frame,
    InvalidFrameError,
    PixelFormat,
    Point,
    Quality,
    Rectangle,
)
from .visualizer import DocumentVisualizer
from .warper import PerspectiveWarper
from .worker import LatestFrameWorker

__all__ = [
    'CoordinateSpace',
    'DetectionConfig',
    'DetectionResult',
    'DocumentDetector',
    'DocumentVisualizer',
    'EdgePass',
    'Frame',
    'InvalidFrameError',
    'LatestFrameWorker',
    'MappingParams',
    'PerspectiveWarper',
    'PixelFormat',
    'Point',
    'ProcessedCapture',
    'Quality',
    'QualityConfig',
    'QualityEvaluator',
    'RectangleSmoother',
    'ReferenceSpace',
    'Rectangle',
    'RegionOfInterest',
    'ScaleMode',
    'StabilizerState',
    'TemporalStabilizer',
    'apply_color_controls',
    'detect',
    'detect_in_yuv',
    'evaluate_quality',
    'map_coordinates',
    'process_capture',
    'warp_and_crop',
]
