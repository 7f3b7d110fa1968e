"""
Canonical ordering of four corner points
"""

import numpy as np


def order_points(points) -> np.ndarray:
    """
    Order four points as top-left, top-right, bottom-left, bottom-right.

    Uses the sum/diff heuristic, which is robust to in-plane rotation:
    top-left minimizes x+y, bottom-right maximizes x+y, top-right
    minimizes y-x and bottom-left maximizes y-x (image y axis points down).

    When the heuristic assigns one point to two roles (a quad rotated by
    about 45 degrees, or a strongly skewed quad), the points are ordered
    by angle around their centroid instead, starting at the point with
    the smallest x+y.

    Args:
        points: Anything convertible to a (4, 2) array of coordinates

    Returns:
        (4, 2) float64 array in canonical order
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    if pts.shape[0] != 4:
        raise ValueError(f"Expected 4 points, got {pts.shape[0]}")

    s = pts.sum(axis=1)
    diff = pts[:, 1] - pts[:, 0]

    # argmin/argmax keep the first index on ties, so the result is stable
    tl = int(np.argmin(s))
    br = int(np.argmax(s))
    tr = int(np.argmin(diff))
    bl = int(np.argmax(diff))

    if len({tl, tr, bl, br}) == 4:
        return pts[[tl, tr, bl, br]]

    return _order_by_angle(pts)


def _order_by_angle(pts: np.ndarray) -> np.ndarray:
    center = pts.mean(axis=0)
    angles = np.arctan2(pts[:, 1] - center[1], pts[:, 0] - center[0])

    # Increasing angle walks clockwise on screen (y axis points down)
    clockwise = list(np.argsort(angles, kind="stable"))
    sums = pts[clockwise].sum(axis=1)
    start = int(np.argmin(sums))
    clockwise = clockwise[start:] + clockwise[:start]

    tl, tr, br, bl = clockwise
    return pts[[tl, tr, bl, br]]
