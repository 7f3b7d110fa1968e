"""
Value types shared by every detection stage
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, NamedTuple, Optional, Tuple

import numpy as np

from .ordering import order_points


class InvalidFrameError(ValueError):
    """A frame buffer does not match its declared size, format or rotation."""


class PixelFormat(Enum):
    GRAY = "gray"
    RGB = "rgb"
    BGR = "bgr"
    RGBA = "rgba"
    BGRA = "bgra"
    NV21 = "nv21"

    @property
    def channels(self) -> int:
        return _CHANNELS[self]


_CHANNELS = {
    PixelFormat.GRAY: 1,
    PixelFormat.RGB: 3,
    PixelFormat.BGR: 3,
    PixelFormat.RGBA: 4,
    PixelFormat.BGRA: 4,
    PixelFormat.NV21: 1,
}

ROTATIONS = (0, 90, 180, 270)


class CoordinateSpace(Enum):
    SENSOR = "sensor"
    IMAGE = "image"
    VIEW = "view"
    BITMAP = "bitmap"


class Quality(Enum):
    """One-shot verdict on a single rectangle."""
    GOOD = 0
    BAD_ANGLE = 1
    TOO_FAR = 2


class EdgePass(Enum):
    """Binary image that produced the accepted candidate."""
    CANNY = "canny"
    ADAPTIVE = "adaptive"


@dataclass(frozen=True, eq=False)
class Frame:
    """
    Immutable view over one image buffer.

    `width` and `height` describe the buffer as delivered by the source;
    `rotation` is the clockwise rotation (0/90/180/270) that brings it
    upright. Buffers are never copied here, the caller keeps ownership.
    """
    data: np.ndarray = field(repr=False)
    width: int
    height: int
    pixel_format: PixelFormat = PixelFormat.BGR
    rotation: int = 0

    def __post_init__(self):
        if self.rotation not in ROTATIONS:
            raise InvalidFrameError(f"Unsupported rotation: {self.rotation}")
        if self.width < 0 or self.height < 0:
            raise InvalidFrameError(f"Negative frame size: {self.width}x{self.height}")

        data = self.data
        if isinstance(data, (bytes, bytearray, memoryview)):
            data = np.frombuffer(data, dtype=np.uint8)
        data = np.asarray(data)

        if data.dtype != np.uint8:
            raise InvalidFrameError(f"Frame data must be uint8, got {data.dtype}")

        if self.width == 0 or self.height == 0:
            if data.size != 0:
                raise InvalidFrameError("Zero-area frame must carry an empty buffer")
            object.__setattr__(self, "data", data)
            return

        object.__setattr__(self, "data", self._shaped(data))

    def _shaped(self, data: np.ndarray) -> np.ndarray:
        w, h = self.width, self.height

        if self.pixel_format is PixelFormat.NV21:
            if w % 2 or h % 2:
                raise InvalidFrameError(f"NV21 frames need even dimensions, got {w}x{h}")
            expected = w * h * 3 // 2
            if data.size != expected:
                raise InvalidFrameError(
                    f"NV21 buffer has {data.size} bytes, expected {expected} for {w}x{h}"
                )
            return data.reshape(h * 3 // 2, w)

        channels = self.pixel_format.channels
        shape = (h, w) if channels == 1 else (h, w, channels)

        if data.ndim == 1:
            expected = w * h * channels
            if data.size != expected:
                raise InvalidFrameError(
                    f"Buffer has {data.size} bytes, expected {expected} for {w}x{h} {self.pixel_format.value}"
                )
            return data.reshape(shape)

        if data.shape != shape:
            raise InvalidFrameError(
                f"Array shape {data.shape} does not match {shape} for {self.pixel_format.value}"
            )
        return data

    @classmethod
    def from_array(
        cls,
        image: np.ndarray,
        pixel_format: Optional[PixelFormat] = None,
        rotation: int = 0
    ) -> "Frame":
        """
        Wrap an OpenCV image array.

        Args:
            image: uint8 array shaped (h, w), (h, w, 3) or (h, w, 4)
            pixel_format: Explicit format; inferred from the shape when omitted
                (2-D is GRAY, 3 channels BGR, 4 channels BGRA, as cv2.imread gives)
            rotation: Clockwise rotation that makes the image upright

        Returns:
            Frame over the same buffer
        """
        image = np.asarray(image)
        if image.size == 0:
            return cls(np.zeros((0,), dtype=np.uint8), 0, 0, pixel_format or PixelFormat.BGR, rotation)

        if pixel_format is None:
            if image.ndim == 2:
                pixel_format = PixelFormat.GRAY
            elif image.ndim == 3 and image.shape[2] == 3:
                pixel_format = PixelFormat.BGR
            elif image.ndim == 3 and image.shape[2] == 4:
                pixel_format = PixelFormat.BGRA
            else:
                raise InvalidFrameError(f"Cannot infer pixel format from shape {image.shape}")

        if pixel_format is PixelFormat.NV21:
            height = image.shape[0] * 2 // 3
            return cls(image, image.shape[1], height, pixel_format, rotation)

        return cls(image, image.shape[1], image.shape[0], pixel_format, rotation)

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    @property
    def upright_size(self) -> Tuple[int, int]:
        """(width, height) after applying `rotation`."""
        if self.rotation in (90, 270):
            return self.height, self.width
        return self.width, self.height


class Point(NamedTuple):
    x: float
    y: float

    def distance_to(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


def _cross(o: Point, a: Point, b: Point) -> float:
    return (a.x - o.x) * (b.y - o.y) - (a.y - o.y) * (b.x - o.x)


def _segments_cross(p1: Point, p2: Point, q1: Point, q2: Point) -> bool:
    d1 = _cross(q1, q2, p1)
    d2 = _cross(q1, q2, p2)
    d3 = _cross(p1, p2, q1)
    d4 = _cross(p1, p2, q2)
    return d1 * d2 < 0 and d3 * d4 < 0


@dataclass(frozen=True)
class Rectangle:
    """
    Four corners in canonical order, tagged with the coordinate space
    they are expressed in.
    """
    top_left: Point
    top_right: Point
    bottom_left: Point
    bottom_right: Point
    space: CoordinateSpace = CoordinateSpace.IMAGE

    @classmethod
    def from_points(cls, points, space: CoordinateSpace = CoordinateSpace.IMAGE) -> "Rectangle":
        """
        Build a rectangle from four unordered points.

        Raises:
            ValueError: if the points do not form four distinct corners of
                a simple polygon
        """
        ordered = order_points(points)
        rectangle = cls.from_array(ordered, space)
        if not rectangle.is_valid():
            raise ValueError(f"Points do not form a valid rectangle: {ordered.tolist()}")
        return rectangle

    @classmethod
    def from_array(cls, ordered, space: CoordinateSpace = CoordinateSpace.IMAGE) -> "Rectangle":
        """Build a rectangle from points already in canonical order."""
        pts = np.asarray(ordered, dtype=np.float64).reshape(4, 2)
        return cls(*(Point(float(x), float(y)) for x, y in pts), space=space)

    @property
    def corners(self) -> Tuple[Point, Point, Point, Point]:
        return self.top_left, self.top_right, self.bottom_left, self.bottom_right

    def as_array(self) -> np.ndarray:
        """(4, 2) float32 array in canonical order (TL, TR, BL, BR)."""
        return np.array(self.corners, dtype=np.float32)

    def as_polygon(self) -> np.ndarray:
        """(4, 2) float32 array in drawing order (TL, TR, BR, BL)."""
        return np.array(
            [self.top_left, self.top_right, self.bottom_right, self.bottom_left],
            dtype=np.float32
        )

    def edge_lengths(self) -> Tuple[float, float, float, float]:
        """Lengths of the (top, right, bottom, left) edges."""
        return (
            self.top_left.distance_to(self.top_right),
            self.top_right.distance_to(self.bottom_right),
            self.bottom_left.distance_to(self.bottom_right),
            self.top_left.distance_to(self.bottom_left),
        )

    def perimeter(self) -> float:
        return sum(self.edge_lengths())

    def area(self) -> float:
        polygon = [self.top_left, self.top_right, self.bottom_right, self.bottom_left]
        total = 0.0
        for i in range(4):
            current = polygon[i]
            nxt = polygon[(i + 1) % 4]
            total += current.x * nxt.y - nxt.x * current.y
        return abs(total) / 2

    def center(self) -> Point:
        return Point(
            sum(p.x for p in self.corners) / 4,
            sum(p.y for p in self.corners) / 4
        )

    def distance_to(self, other: "Rectangle") -> float:
        """Mean distance between corresponding corners."""
        return sum(a.distance_to(b) for a, b in zip(self.corners, other.corners)) / 4

    def map_points(self, fn: Callable[[Point], Point], space: CoordinateSpace) -> "Rectangle":
        """Apply a point transform to every corner, keeping the corner roles."""
        return Rectangle(*(fn(p) for p in self.corners), space=space)

    def translated(self, dx: float, dy: float) -> "Rectangle":
        return self.map_points(lambda p: Point(p.x + dx, p.y + dy), self.space)

    def is_valid(self) -> bool:
        """True if the corners are finite, distinct and form a simple polygon."""
        corners = self.corners
        if not all(math.isfinite(p.x) and math.isfinite(p.y) for p in corners):
            return False

        for i in range(4):
            for j in range(i + 1, 4):
                if corners[i].distance_to(corners[j]) < 1e-6:
                    return False

        tl, tr, bl, br = corners
        if _segments_cross(tl, tr, br, bl) or _segments_cross(tr, br, bl, tl):
            return False
        return True

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        return {
            "topLeft": {"x": self.top_left.x, "y": self.top_left.y},
            "topRight": {"x": self.top_right.x, "y": self.top_right.y},
            "bottomLeft": {"x": self.bottom_left.x, "y": self.bottom_left.y},
            "bottomRight": {"x": self.bottom_right.x, "y": self.bottom_right.y},
        }


@dataclass(frozen=True)
class DetectionResult:
    """
    Output of one detection call.

    `rectangle` is None when no document was found. Frame dimensions are
    the upright ones, the space `rectangle` is expressed in.
    """
    rectangle: Optional[Rectangle]
    frame_width: int
    frame_height: int
    edge_pass: Optional[EdgePass] = None

    @property
    def found(self) -> bool:
        return self.rectangle is not None

    def to_dict(self) -> Dict:
        return {
            "rectangle": self.rectangle.to_dict() if self.rectangle is not None else None,
            "frameWidth": self.frame_width,
            "frameHeight": self.frame_height,
            "edgePass": self.edge_pass.value if self.edge_pass is not None else None,
        }
