"""
Shared fixtures: synthetic documents drawn with OpenCV, no image assets needed
"""

import cv2
import numpy as np
import pytest


def draw_document(width, height, corners, background=40, fill=230, outline=None, outline_thickness=3):
    """
    BGR image of a flat-colored quadrilateral on a flat background.

    Args:
        corners: Polygon in drawing order (TL, TR, BR, BL)
        outline: Optional gray level of a closed outline along the polygon
    """
    image = np.full((height, width, 3), background, dtype=np.uint8)
    polygon = np.array(corners, dtype=np.int32)
    cv2.fillPoly(image, [polygon], (fill, fill, fill))
    if outline is not None:
        cv2.polylines(image, [polygon], True, (outline, outline, outline), outline_thickness)
    return image


def bgr_to_nv21(image):
    """NV21 bytes (Y plane, then interleaved V/U) for an even-sized BGR image."""
    h, w = image.shape[:2]
    i420 = cv2.cvtColor(image, cv2.COLOR_BGR2YUV_I420).reshape(-1)
    y = i420[:w * h]
    u = i420[w * h:w * h + w * h // 4]
    v = i420[w * h + w * h // 4:]
    vu = np.empty(u.size * 2, dtype=np.uint8)
    vu[0::2] = v
    vu[1::2] = u
    return np.concatenate([y, vu]).tobytes()


@pytest.fixture
def document_image():
    """Factory for synthetic document images"""
    return draw_document


@pytest.fixture
def nv21():
    """Factory converting BGR images to NV21 buffers"""
    return bgr_to_nv21


@pytest.fixture
def high_contrast_document():
    """640x480 light sheet on a dark desk, axis aligned"""
    corners = [(120, 90), (520, 90), (520, 390), (120, 390)]
    return draw_document(640, 480, corners), corners


@pytest.fixture
def low_contrast_document():
    """
    640x480 plain card 6 levels brighter than the desk; too faint for Canny.
    """
    corners = [(140, 100), (500, 100), (500, 380), (140, 380)]
    image = draw_document(640, 480, corners, background=120, fill=126)
    return image, corners
