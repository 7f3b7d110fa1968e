"""
Tests for capture post-processing
"""

import numpy as np
import pytest

from document_detection import Frame, PixelFormat, Point, Rectangle
from document_detection.processing import apply_color_controls, process_capture


@pytest.fixture
def colored():
    image = np.zeros((60, 80, 3), dtype=np.uint8)
    image[:, :] = (40, 100, 200)
    return image


class TestApplyColorControls:

    def test_identity_returns_copy(self, colored):
        result = apply_color_controls(colored)
        np.testing.assert_array_equal(result, colored)
        assert result is not colored

    def test_brightness(self, colored):
        result = apply_color_controls(colored, brightness=0.1)
        assert abs(int(result[0, 0, 1]) - 125) <= 1

    def test_contrast_saturates(self, colored):
        result = apply_color_controls(colored, contrast=2.0)
        assert tuple(result[0, 0]) == (80, 200, 255)

    def test_zero_saturation_is_gray(self, colored):
        result = apply_color_controls(colored, saturation=0.0)
        assert result[0, 0, 0] == result[0, 0, 1] == result[0, 0, 2]

    def test_grayscale_ignores_saturation(self):
        gray = np.full((10, 10), 90, dtype=np.uint8)
        result = apply_color_controls(gray, saturation=0.0, pixel_format=PixelFormat.GRAY)
        np.testing.assert_array_equal(result, gray)

    def test_alpha_kept(self):
        image = np.zeros((10, 10, 4), dtype=np.uint8)
        image[:, :] = (50, 50, 50, 77)
        result = apply_color_controls(image, brightness=0.2, pixel_format=PixelFormat.RGBA)
        assert (result[:, :, 3] == 77).all()
        assert result[0, 0, 0] > 50


class TestProcessCapture:

    @pytest.fixture
    def frame(self, document_image):
        image = document_image(320, 240, [(60, 40), (260, 40), (260, 200), (60, 200)])
        return Frame.from_array(image)

    @pytest.fixture
    def rectangle(self):
        return Rectangle(Point(60, 40), Point(260, 40), Point(60, 200), Point(260, 200))

    def test_crops_to_document(self, frame, rectangle):
        capture = process_capture(frame, rectangle)
        assert (capture.cropped.width, capture.cropped.height) == (200, 160)
        assert capture.initial is frame
        assert capture.rectangle is rectangle

    def test_without_crop(self, frame, rectangle):
        capture = process_capture(frame, rectangle, brightness=0.1, should_crop=False)
        assert (capture.cropped.width, capture.cropped.height) == (320, 240)
        assert capture.cropped.data[0, 0, 0] > frame.data[0, 0, 0]

    def test_without_rectangle(self, frame):
        capture = process_capture(frame)
        np.testing.assert_array_equal(capture.cropped.data, frame.data)
        assert capture.rectangle is None

    def test_empty_frame(self, rectangle):
        frame = Frame(b"", 0, 0)
        assert process_capture(frame, rectangle).cropped is frame
