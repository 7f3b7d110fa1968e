"""
Tests for document visualization
"""

import numpy as np
import pytest

from document_detection import DocumentVisualizer, Point, Quality, Rectangle
from document_detection.visualizer import QUALITY_COLORS


@pytest.fixture
def image():
    return np.full((240, 320, 3), 128, dtype=np.uint8)


@pytest.fixture
def rectangle():
    return Rectangle(Point(60, 40), Point(260, 40), Point(60, 200), Point(260, 200))


class TestDocumentVisualizer:

    def test_keeps_shape_and_input(self, image, rectangle):
        original = image.copy()
        result = DocumentVisualizer().visualize(image, rectangle)
        assert result.shape == image.shape
        np.testing.assert_array_equal(image, original)
        assert not np.array_equal(result, image)

    def test_quality_selects_color(self, image, rectangle):
        visualizer = DocumentVisualizer(border_thickness=1)
        result = visualizer.visualize(image, rectangle, Quality.TOO_FAR, draw_overlay=False)
        assert tuple(result[40, 160]) == QUALITY_COLORS[Quality.TOO_FAR]

    def test_default_color(self):
        visualizer = DocumentVisualizer(border_color=(1, 2, 3))
        assert visualizer.color_for(None) == (1, 2, 3)
        assert visualizer.color_for(Quality.GOOD) == QUALITY_COLORS[Quality.GOOD]

    def test_no_rectangle(self, image):
        assert DocumentVisualizer().visualize(image, None) is image

    def test_corners_outside_image(self, image):
        rectangle = Rectangle(Point(-100, -50), Point(400, -50), Point(-100, 300), Point(400, 300))
        result = DocumentVisualizer().visualize(image, rectangle)
        assert result.shape == image.shape

    def test_edges_clipped_to_image(self, image):
        wide = Rectangle(Point(-100, 40), Point(400, 40), Point(-100, 200), Point(400, 200))
        visualizer = DocumentVisualizer(border_thickness=1)
        result = visualizer.visualize(image, wide, Quality.GOOD, draw_overlay=False)
        color = QUALITY_COLORS[Quality.GOOD]
        assert tuple(result[40, 0]) == color
        assert tuple(result[40, 319]) == color
        assert tuple(result[120, 160]) == (128, 128, 128)

    def test_outline_fully_outside(self, image):
        far = Rectangle(Point(500, 300), Point(700, 300), Point(500, 400), Point(700, 400))
        result = DocumentVisualizer().visualize(image, far, draw_overlay=False)
        np.testing.assert_array_equal(result, image)

    def test_info_text(self, image, rectangle):
        result = DocumentVisualizer().visualize_with_info(image, rectangle, Quality.GOOD)
        assert result.shape == image.shape
        # Text block is drawn in the top left corner
        assert not np.array_equal(result[10:40, 10:100], image[10:40, 10:100])

    def test_side_by_side(self, image):
        gray = np.zeros((120, 80), dtype=np.uint8)
        combined = DocumentVisualizer().create_side_by_side(image, gray)
        assert combined.shape == (240, 320 + 160, 3)
