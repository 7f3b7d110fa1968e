"""
Document detector for camera frames and photos using OpenCV
"""

import logging
from typing import Optional, Union

import numpy as np

from .bounds import RegionOfInterest
from .config import DetectionConfig, QualityConfig
from .contours import ContourScorer, ScoringStats
from .corners import CornerRefiner
from .edges import EdgeExtractor
from .mapping import MappingParams, map_rectangle
from .preprocessor import Preprocessor
from .quality import QualityEvaluator, ReferenceSpace
from .types import (
    CoordinateSpace,
    DetectionResult,
    EdgePass,
    Frame,
    PixelFormat,
    Quality,
    Rectangle,
)
from .warper import PerspectiveWarper, destination_size

logger = logging.getLogger(__name__)

FrameLike = Union[Frame, np.ndarray, None]


class DocumentDetector:
    """
    Finds the quadrilateral boundary of a document in a single frame.

    Pipeline: preprocess (grayscale, CLAHE, blur), Canny edge map, contour
    scoring, sub-pixel corner refinement. When the Canny map yields no
    acceptable quadrilateral, contour scoring is retried on an adaptive
    threshold map of the same blurred image.

    The detector keeps no state between calls. One instance may be shared
    by callers as long as each frame source runs one detection at a time.
    """

    def __init__(
        self,
        config: Optional[DetectionConfig] = None,
        quality_config: Optional[QualityConfig] = None
    ):
        """
        Initialize the detector.

        Args:
            config: Detection parameters (defaults when omitted)
            quality_config: Quality policy used by `evaluate_quality`
        """
        self.config = (config or DetectionConfig()).validate()
        self.quality_config = (quality_config or QualityConfig()).validate()

        self.preprocessor = Preprocessor(self.config)
        self.edge_extractor = EdgeExtractor(self.config)
        self.scorer = ContourScorer(self.config)
        self.refiner = CornerRefiner(self.config)
        self.evaluator = QualityEvaluator(self.quality_config)
        self.warper = PerspectiveWarper()

    def detect(self, frame: FrameLike, roi: Optional[RegionOfInterest] = None) -> DetectionResult:
        """
        Detect a document in a frame.

        Args:
            frame: Frame, or an OpenCV image array (BGR/BGRA/grayscale)
            roi: Optional region in upright image space to restrict the search

        Returns:
            DetectionResult with the rectangle in upright image space, or an
            empty result when nothing was found
        """
        if frame is None:
            return DetectionResult(None, 0, 0)
        if not isinstance(frame, Frame):
            frame = Frame.from_array(frame)

        width, height = frame.upright_size
        if frame.is_empty:
            return DetectionResult(None, width, height)

        upright = self.preprocessor.to_upright(frame)
        offset_x, offset_y = 0, 0

        if roi is not None:
            clamped = roi.clamp(width, height)
            if clamped is None:
                logger.warning("%s has no usable overlap with the %dx%d frame", roi, width, height)
                return DetectionResult(None, width, height)
            offset_x, offset_y, roi_w, roi_h = clamped
            upright = upright[offset_y:offset_y + roi_h, offset_x:offset_x + roi_w]

        gray = self.preprocessor.to_gray(upright, frame.pixel_format)
        blurred = self.preprocessor.enhance(gray)

        corners, edge_pass = self._find_corners(blurred)
        if corners is None:
            return DetectionResult(None, width, height)

        rectangle = Rectangle.from_array(corners)
        if offset_x or offset_y:
            rectangle = rectangle.translated(offset_x, offset_y)

        if not rectangle.is_valid():
            logger.debug("Discarding invalid rectangle %s", rectangle.to_dict())
            return DetectionResult(None, width, height)

        return DetectionResult(rectangle, width, height, edge_pass)

    def _find_corners(self, blurred: np.ndarray):
        stats = ScoringStats()
        low, high = self.edge_extractor.canny_thresholds(blurred)

        edge_pass = EdgePass.CANNY
        candidate = self.scorer.find_best(self.edge_extractor.canny_edges(blurred), stats)

        if candidate is None and self.config.use_adaptive_fallback:
            edge_pass = EdgePass.ADAPTIVE
            candidate = self.scorer.find_best(self.edge_extractor.adaptive_binary(blurred), stats)

        logger.debug(
            "cannyLow=%.1f cannyHigh=%.1f contours=%d candidates=%d bestScore=%.1f pass=%s",
            low, high, stats.contours, stats.candidates, stats.best_score,
            edge_pass.value if candidate is not None else None
        )

        if candidate is None:
            return None, None

        corners = candidate.corners
        if self.config.refine_corners:
            corners = self.refiner.refine(blurred, corners)

        return corners, edge_pass

    def detect_in_yuv(
        self,
        yuv_bytes,
        width: int,
        height: int,
        rotation: int = 0,
        roi: Optional[RegionOfInterest] = None
    ) -> DetectionResult:
        """
        Detect a document in an NV21 camera buffer.

        Args:
            yuv_bytes: NV21 bytes (Y plane followed by interleaved VU), w*h*3/2 long
            width: Sensor buffer width
            height: Sensor buffer height
            rotation: Clockwise rotation that makes the buffer upright
            roi: Optional region in upright image space

        Returns:
            DetectionResult in upright image space

        Raises:
            InvalidFrameError: if the buffer does not match width and height
        """
        frame = Frame(yuv_bytes, width, height, PixelFormat.NV21, rotation)
        return self.detect(frame, roi)

    def evaluate_quality(
        self,
        rectangle: Rectangle,
        ref_width: float,
        ref_height: float,
        space: ReferenceSpace = ReferenceSpace.VIEW
    ) -> Quality:
        return self.evaluator.evaluate(rectangle, ref_width, ref_height, space)

    def warp_and_crop(self, frame: FrameLike, rectangle: Rectangle) -> Frame:
        """Perspective-correct crop; returns the original frame if the rectangle is degenerate."""
        if not isinstance(frame, Frame):
            frame = Frame.from_array(frame)
        return self.warper.warp(frame, rectangle)

    def map_coordinates(
        self,
        rectangle: Rectangle,
        from_space: CoordinateSpace,
        to_space: CoordinateSpace,
        params: MappingParams
    ) -> Rectangle:
        return map_rectangle(rectangle, from_space, to_space, params)

    def get_document_dimensions(self, rectangle: Rectangle):
        """(width, height) of the flattened document in pixels."""
        return destination_size(rectangle)


_default_detector = None


def _detector(config: Optional[DetectionConfig] = None) -> DocumentDetector:
    global _default_detector
    if config is not None:
        return DocumentDetector(config)
    if _default_detector is None:
        _default_detector = DocumentDetector()
    return _default_detector


def detect(
    frame: FrameLike,
    roi: Optional[RegionOfInterest] = None,
    config: Optional[DetectionConfig] = None
) -> DetectionResult:
    """Full detection pipeline on an already decoded frame."""
    return _detector(config).detect(frame, roi)


def detect_in_yuv(
    yuv_bytes,
    width: int,
    height: int,
    rotation: int = 0,
    roi: Optional[RegionOfInterest] = None,
    config: Optional[DetectionConfig] = None
) -> DetectionResult:
    """Full detection pipeline on an NV21 camera buffer."""
    return _detector(config).detect_in_yuv(yuv_bytes, width, height, rotation, roi)


def evaluate_quality(
    rectangle: Rectangle,
    ref_width: float,
    ref_height: float,
    space: ReferenceSpace = ReferenceSpace.VIEW,
    config: Optional[QualityConfig] = None
) -> Quality:
    """Quality verdict for a rectangle against a reference frame size."""
    return QualityEvaluator(config).evaluate(rectangle, ref_width, ref_height, space)


def warp_and_crop(frame: FrameLike, rectangle: Rectangle) -> Frame:
    """Perspective-correct crop of a frame."""
    if not isinstance(frame, Frame):
        frame = Frame.from_array(frame)
    return PerspectiveWarper().warp(frame, rectangle)


def map_coordinates(
    rectangle: Rectangle,
    from_space: CoordinateSpace,
    to_space: CoordinateSpace,
    params: MappingParams
) -> Rectangle:
    """Convert a rectangle between sensor, image, view and bitmap space."""
    return map_rectangle(rectangle, from_space, to_space, params)
