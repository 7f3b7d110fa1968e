"""
Coordinate transforms between sensor, image, view and bitmap space.

Spaces:
    SENSOR: the raw buffer as delivered by the camera
    IMAGE:  the upright image (sensor rotated clockwise by `rotation`)
    VIEW:   a display viewport showing the image scaled to fill or fit
    BITMAP: any other bitmap size (for example the captured still photo)

All functions are pure and clamp their output to the destination bounds.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from .ordering import order_points
from .types import CoordinateSpace, Point, Rectangle

Size = Tuple[float, float]


class ScaleMode(Enum):
    FILL = "fill"  # crop to fill the view, scale = max(sx, sy)
    FIT = "fit"    # letterbox inside the view, scale = min(sx, sy)


@dataclass(frozen=True)
class MappingParams:
    """
    Geometry needed to move between spaces.

    Args:
        image_size: Upright image (width, height)
        view_size: Viewport (width, height), needed for VIEW
        bitmap_size: Destination bitmap (width, height), needed for BITMAP
        rotation: Clockwise rotation from sensor to image, needed for SENSOR
        scale_mode: How the image is laid out in the view
    """
    image_size: Size
    view_size: Optional[Size] = None
    bitmap_size: Optional[Size] = None
    rotation: int = 0
    scale_mode: ScaleMode = ScaleMode.FILL

    @property
    def sensor_size(self) -> Size:
        w, h = self.image_size
        if self.rotation in (90, 270):
            return h, w
        return w, h


def _clamp(point: Point, width: float, height: float) -> Point:
    return Point(min(max(point.x, 0.0), width), min(max(point.y, 0.0), height))


def _is_empty(size: Size) -> bool:
    return size[0] <= 0 or size[1] <= 0


def rotate_point(point: Point, sensor_size: Size, rotation: int) -> Point:
    """Sensor point to upright image point for a clockwise rotation."""
    w, h = sensor_size
    x, y = point
    if rotation == 90:
        return Point(h - y, x)
    if rotation == 180:
        return Point(w - x, h - y)
    if rotation == 270:
        return Point(y, w - x)
    return Point(x, y)


def unrotate_point(point: Point, sensor_size: Size, rotation: int) -> Point:
    """Upright image point back to sensor point."""
    w, h = sensor_size
    x, y = point
    if rotation == 90:
        return Point(y, h - x)
    if rotation == 180:
        return Point(w - x, h - y)
    if rotation == 270:
        return Point(w - y, x)
    return Point(x, y)


def _view_transform(image_size: Size, view_size: Size, mode: ScaleMode) -> Tuple[float, float, float]:
    """Scale and the offsets of the scaled image's origin inside the view."""
    iw, ih = image_size
    vw, vh = view_size
    sx, sy = vw / iw, vh / ih
    scale = max(sx, sy) if mode is ScaleMode.FILL else min(sx, sy)
    # Negative offsets for fill (image cropped), positive for fit (padding)
    offset_x = (vw - iw * scale) / 2.0
    offset_y = (vh - ih * scale) / 2.0
    return scale, offset_x, offset_y


def sensor_to_image(rectangle: Rectangle, sensor_size: Size, rotation: int) -> Rectangle:
    """
    Rotate a sensor-space rectangle to upright image space.

    The rotated points are re-ordered so the corner roles stay canonical.
    """
    _check_space(rectangle, CoordinateSpace.SENSOR)
    w, h = sensor_size
    out_w, out_h = (h, w) if rotation in (90, 270) else (w, h)
    return _reorder(rectangle.map_points(
        lambda p: _clamp(rotate_point(p, sensor_size, rotation), out_w, out_h),
        CoordinateSpace.IMAGE
    ))


def image_to_sensor(rectangle: Rectangle, sensor_size: Size, rotation: int) -> Rectangle:
    """Inverse of `sensor_to_image`."""
    _check_space(rectangle, CoordinateSpace.IMAGE)
    w, h = sensor_size
    return _reorder(rectangle.map_points(
        lambda p: _clamp(unrotate_point(p, sensor_size, rotation), w, h),
        CoordinateSpace.SENSOR
    ))


def image_to_view(
    rectangle: Rectangle,
    image_size: Size,
    view_size: Size,
    mode: ScaleMode = ScaleMode.FILL
) -> Rectangle:
    """
    Map an image-space rectangle into a viewport.

    Args:
        rectangle: Rectangle in upright image space
        image_size: Upright image (width, height)
        view_size: Viewport (width, height)
        mode: FILL (center crop) or FIT (letterbox)
    """
    _check_space(rectangle, CoordinateSpace.IMAGE)
    if _is_empty(image_size) or _is_empty(view_size):
        return rectangle.map_points(lambda p: p, CoordinateSpace.VIEW)

    scale, ox, oy = _view_transform(image_size, view_size, mode)
    vw, vh = view_size
    return rectangle.map_points(
        lambda p: _clamp(Point(p.x * scale + ox, p.y * scale + oy), vw, vh),
        CoordinateSpace.VIEW
    )


def view_to_image(
    rectangle: Rectangle,
    image_size: Size,
    view_size: Size,
    mode: ScaleMode = ScaleMode.FILL
) -> Rectangle:
    """Inverse of `image_to_view`."""
    _check_space(rectangle, CoordinateSpace.VIEW)
    if _is_empty(image_size) or _is_empty(view_size):
        return rectangle.map_points(lambda p: p, CoordinateSpace.IMAGE)

    scale, ox, oy = _view_transform(image_size, view_size, mode)
    iw, ih = image_size
    return rectangle.map_points(
        lambda p: _clamp(Point((p.x - ox) / scale, (p.y - oy) / scale), iw, ih),
        CoordinateSpace.IMAGE
    )


def scale_to_bitmap(
    rectangle: Rectangle,
    source_size: Size,
    bitmap_size: Size,
    space: CoordinateSpace = CoordinateSpace.BITMAP
) -> Rectangle:
    """
    Independent X/Y scaling between two bitmap sizes, no aspect correction.

    Used to re-target a rectangle found on a preview frame onto a
    captured photo of a different resolution.
    """
    if _is_empty(source_size):
        return rectangle.map_points(lambda p: p, space)

    sx = bitmap_size[0] / source_size[0]
    sy = bitmap_size[1] / source_size[1]
    bw, bh = bitmap_size
    return rectangle.map_points(lambda p: _clamp(Point(p.x * sx, p.y * sy), bw, bh), space)


def map_rectangle(
    rectangle: Rectangle,
    from_space: CoordinateSpace,
    to_space: CoordinateSpace,
    params: MappingParams
) -> Rectangle:
    """
    Convert a rectangle between any two coordinate spaces.

    Conversions go through upright image space.

    Raises:
        ValueError: if the rectangle is not in `from_space` or `params`
            lacks a size the conversion needs
    """
    _check_space(rectangle, from_space)
    if from_space is to_space:
        return rectangle

    image = _to_image(rectangle, from_space, params)
    return _from_image(image, to_space, params)


def _to_image(rectangle: Rectangle, space: CoordinateSpace, params: MappingParams) -> Rectangle:
    if space is CoordinateSpace.IMAGE:
        return rectangle
    if space is CoordinateSpace.SENSOR:
        return sensor_to_image(rectangle, params.sensor_size, params.rotation)
    if space is CoordinateSpace.VIEW:
        return view_to_image(rectangle, params.image_size, _require(params.view_size, "view_size"), params.scale_mode)
    return scale_to_bitmap(
        rectangle, _require(params.bitmap_size, "bitmap_size"), params.image_size, CoordinateSpace.IMAGE
    )


def _from_image(rectangle: Rectangle, space: CoordinateSpace, params: MappingParams) -> Rectangle:
    if space is CoordinateSpace.IMAGE:
        return rectangle
    if space is CoordinateSpace.SENSOR:
        return image_to_sensor(rectangle, params.sensor_size, params.rotation)
    if space is CoordinateSpace.VIEW:
        return image_to_view(rectangle, params.image_size, _require(params.view_size, "view_size"), params.scale_mode)
    return scale_to_bitmap(rectangle, params.image_size, _require(params.bitmap_size, "bitmap_size"))


def _require(size: Optional[Size], name: str) -> Size:
    if size is None:
        raise ValueError(f"MappingParams.{name} is required for this conversion")
    return size


def _check_space(rectangle: Rectangle, space: CoordinateSpace):
    if rectangle.space is not space:
        raise ValueError(f"Rectangle is in {rectangle.space.value} space, expected {space.value}")


def _reorder(rectangle: Rectangle) -> Rectangle:
    """Restore canonical corner roles after a rotation."""
    points = np.array(rectangle.corners, dtype=np.float64)
    return Rectangle.from_array(order_points(points), rectangle.space)
