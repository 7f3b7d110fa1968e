"""
Tests for the quality verdict
"""

import math

import pytest

from document_detection import (
    Point,
    Quality,
    QualityConfig,
    QualityEvaluator,
    Rectangle,
    ReferenceSpace,
    evaluate_quality,
)


def box(left, top, right, bottom):
    return Rectangle(Point(left, top), Point(right, top), Point(left, bottom), Point(right, bottom))


class TestViewSpaceQuality:
    """Ratio based rule on a 1000x1000 view"""

    @pytest.fixture
    def evaluator(self):
        return QualityEvaluator()

    def test_half_of_view_is_good(self, evaluator):
        side = math.sqrt(0.5) * 1000
        offset = (1000 - side) / 2
        rectangle = box(offset, offset, offset + side, offset + side)
        assert evaluator.evaluate(rectangle, 1000, 1000, ReferenceSpace.VIEW) is Quality.GOOD

    def test_four_percent_is_too_far(self, evaluator):
        rectangle = box(400, 400, 600, 600)
        assert evaluator.evaluate(rectangle, 1000, 1000) is Quality.TOO_FAR

    def test_whole_view_is_too_far(self, evaluator):
        """Almost the entire viewport is the screen border, not a document"""
        assert evaluator.evaluate(box(0, 0, 1000, 1000), 1000, 1000) is Quality.TOO_FAR

    def test_skewed_edge_is_bad_angle(self, evaluator):
        # Top edge tilted by 20 degrees
        rise = 600 * math.tan(math.radians(20))
        rectangle = Rectangle(Point(200, 300), Point(800, 300 - rise), Point(200, 900), Point(800, 900))
        assert evaluator.evaluate(rectangle, 1000, 1000) is Quality.BAD_ANGLE

    def test_opposite_edge_ratio(self):
        # Left edge four times the right edge
        rectangle = Rectangle(Point(200, 200), Point(800, 425), Point(200, 800), Point(800, 575))
        evaluator = QualityEvaluator(QualityConfig(max_skew_ratio=1.0))
        assert evaluator.evaluate(rectangle, 1000, 1000) is Quality.BAD_ANGLE

    def test_zero_view_is_too_far(self, evaluator):
        assert evaluator.evaluate(box(0, 0, 10, 10), 0, 0) is Quality.TOO_FAR

    def test_thresholds_configurable(self):
        rectangle = box(400, 400, 600, 600)
        relaxed = QualityConfig(min_area_ratio=0.01)
        assert evaluate_quality(rectangle, 1000, 1000, config=relaxed) is Quality.GOOD


class TestImageSpaceQuality:
    """Absolute pixel rule on a 1000x1000 image"""

    @pytest.fixture
    def evaluator(self):
        return QualityEvaluator()

    def test_filling_image_is_good(self, evaluator):
        rectangle = box(50, 50, 950, 950)
        assert evaluator.evaluate(rectangle, 1000, 1000, ReferenceSpace.IMAGE) is Quality.GOOD

    def test_misaligned_top_is_bad_angle(self, evaluator):
        rectangle = Rectangle(Point(50, 50), Point(950, 180), Point(50, 950), Point(950, 950))
        assert evaluator.evaluate(rectangle, 1000, 1000, ReferenceSpace.IMAGE) is Quality.BAD_ANGLE

    def test_top_far_from_edge_is_too_far(self, evaluator):
        rectangle = box(50, 200, 950, 950)
        assert evaluator.evaluate(rectangle, 1000, 1000, ReferenceSpace.IMAGE) is Quality.TOO_FAR

    def test_bottom_far_from_edge_is_too_far(self, evaluator):
        rectangle = box(50, 50, 950, 800)
        assert evaluator.evaluate(rectangle, 1000, 1000, ReferenceSpace.IMAGE) is Quality.TOO_FAR

    def test_angle_checked_before_distance(self, evaluator):
        rectangle = Rectangle(Point(50, 300), Point(950, 450), Point(50, 950), Point(950, 950))
        assert evaluator.evaluate(rectangle, 1000, 1000, ReferenceSpace.IMAGE) is Quality.BAD_ANGLE


class TestQualityConfig:

    def test_invalid_ratio_range(self):
        with pytest.raises(ValueError):
            QualityConfig(min_area_ratio=0.5, max_area_ratio=0.4).validate()

    def test_with_overrides(self):
        config = QualityConfig().with_overrides(max_skew_ratio=0.2)
        assert config.max_skew_ratio == 0.2
        assert config.min_area_ratio == 0.06
