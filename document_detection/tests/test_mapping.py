"""
Tests for coordinate space transforms
"""

import pytest

from document_detection import (
    CoordinateSpace,
    MappingParams,
    Point,
    Rectangle,
    ScaleMode,
    map_coordinates,
)
from document_detection.mapping import (
    image_to_sensor,
    image_to_view,
    rotate_point,
    scale_to_bitmap,
    sensor_to_image,
    unrotate_point,
    view_to_image,
)


def box(left, top, right, bottom, space=CoordinateSpace.IMAGE):
    return Rectangle(Point(left, top), Point(right, top), Point(left, bottom), Point(right, bottom), space)


def assert_rectangles_close(actual, expected, tolerance=1e-6):
    assert actual.space is expected.space
    for a, b in zip(actual.corners, expected.corners):
        assert a.x == pytest.approx(b.x, abs=tolerance)
        assert a.y == pytest.approx(b.y, abs=tolerance)


class TestViewMapping:
    """640x480 image shown on a 1080x1920 portrait view"""

    image_size = (640, 480)
    view_size = (1080, 1920)

    @pytest.fixture
    def rectangle(self):
        return box(200, 100, 440, 380)

    def test_fill_scales_by_max(self, rectangle):
        view = image_to_view(rectangle, self.image_size, self.view_size, ScaleMode.FILL)
        # scale = max(1080/640, 1920/480) = 4, image cropped 740 px on each side
        assert_rectangles_close(view, box(60, 400, 1020, 1520, CoordinateSpace.VIEW))

    def test_fit_scales_by_min(self):
        view = image_to_view(box(0, 0, 640, 480), self.image_size, self.view_size, ScaleMode.FIT)
        # scale = 1080/640, letterboxed 555 px top and bottom
        assert_rectangles_close(view, box(0, 555, 1080, 1365, CoordinateSpace.VIEW))

    @pytest.mark.parametrize("mode", [ScaleMode.FILL, ScaleMode.FIT])
    def test_round_trip(self, rectangle, mode):
        view = image_to_view(rectangle, self.image_size, self.view_size, mode)
        back = view_to_image(view, self.image_size, self.view_size, mode)
        assert_rectangles_close(back, rectangle)

    def test_results_clamped_to_view(self):
        view = image_to_view(box(0, 0, 640, 480), self.image_size, self.view_size, ScaleMode.FILL)
        for p in view.corners:
            assert 0 <= p.x <= 1080
            assert 0 <= p.y <= 1920

    def test_zero_sized_view_returns_retagged_rectangle(self, rectangle):
        view = image_to_view(rectangle, self.image_size, (0, 0))
        assert view.space is CoordinateSpace.VIEW
        assert view.corners == rectangle.corners

    def test_space_mismatch_raises(self, rectangle):
        with pytest.raises(ValueError):
            view_to_image(rectangle, self.image_size, self.view_size)


class TestSensorMapping:
    """1280x960 sensor buffer rotated into a 960x1280 upright image"""

    sensor_size = (1280, 960)

    def test_rotate_point(self):
        assert rotate_point(Point(0, 0), self.sensor_size, 90) == Point(960, 0)
        assert rotate_point(Point(0, 0), self.sensor_size, 180) == Point(1280, 960)
        assert rotate_point(Point(0, 0), self.sensor_size, 270) == Point(0, 1280)
        assert rotate_point(Point(10, 20), self.sensor_size, 0) == Point(10, 20)

    @pytest.mark.parametrize("rotation", [0, 90, 180, 270])
    def test_unrotate_inverts_rotate(self, rotation):
        p = Point(123.5, 456.25)
        assert unrotate_point(rotate_point(p, self.sensor_size, rotation), self.sensor_size, rotation) == p

    def test_rotation_keeps_canonical_roles(self):
        sensor = box(100, 50, 500, 350, CoordinateSpace.SENSOR)
        image = sensor_to_image(sensor, self.sensor_size, 90)
        assert_rectangles_close(image, box(610, 100, 910, 500))

    @pytest.mark.parametrize("rotation", [0, 90, 180, 270])
    def test_round_trip(self, rotation):
        sensor = box(100, 50, 500, 350, CoordinateSpace.SENSOR)
        image = sensor_to_image(sensor, self.sensor_size, rotation)
        assert_rectangles_close(image_to_sensor(image, self.sensor_size, rotation), sensor)


class TestBitmapMapping:

    def test_independent_axis_scaling(self):
        bitmap = scale_to_bitmap(box(100, 100, 300, 200), (640, 480), (1280, 1440))
        assert_rectangles_close(bitmap, box(200, 300, 600, 600, CoordinateSpace.BITMAP))

    def test_clamped_to_bitmap(self):
        bitmap = scale_to_bitmap(box(0, 0, 700, 500), (640, 480), (320, 240))
        assert bitmap.bottom_right == Point(320, 240)


class TestMapCoordinates:

    @pytest.fixture
    def params(self):
        return MappingParams(
            image_size=(960, 1280),
            view_size=(1080, 1920),
            bitmap_size=(1920, 2560),
            rotation=90,
            scale_mode=ScaleMode.FIT
        )

    def test_sensor_size_from_rotation(self, params):
        assert params.sensor_size == (1280, 960)

    def test_same_space_is_identity(self, params):
        rectangle = box(10, 10, 100, 100)
        assert map_coordinates(rectangle, CoordinateSpace.IMAGE, CoordinateSpace.IMAGE, params) is rectangle

    def test_image_to_bitmap(self, params):
        bitmap = map_coordinates(box(100, 100, 400, 600), CoordinateSpace.IMAGE, CoordinateSpace.BITMAP, params)
        assert_rectangles_close(bitmap, box(200, 200, 800, 1200, CoordinateSpace.BITMAP))

    def test_view_to_bitmap_goes_through_image(self, params):
        image = box(100, 100, 400, 600)
        view = map_coordinates(image, CoordinateSpace.IMAGE, CoordinateSpace.VIEW, params)
        bitmap = map_coordinates(view, CoordinateSpace.VIEW, CoordinateSpace.BITMAP, params)
        assert_rectangles_close(bitmap, box(200, 200, 800, 1200, CoordinateSpace.BITMAP))

    def test_sensor_to_view_round_trip(self, params):
        sensor = box(100, 50, 500, 350, CoordinateSpace.SENSOR)
        view = map_coordinates(sensor, CoordinateSpace.SENSOR, CoordinateSpace.VIEW, params)
        back = map_coordinates(view, CoordinateSpace.VIEW, CoordinateSpace.SENSOR, params)
        assert_rectangles_close(back, sensor, tolerance=1e-6)

    def test_wrong_source_space(self, params):
        with pytest.raises(ValueError):
            map_coordinates(box(0, 0, 10, 10), CoordinateSpace.VIEW, CoordinateSpace.IMAGE, params)

    def test_missing_view_size(self):
        params = MappingParams(image_size=(640, 480))
        with pytest.raises(ValueError):
            map_coordinates(box(0, 0, 10, 10), CoordinateSpace.IMAGE, CoordinateSpace.VIEW, params)
