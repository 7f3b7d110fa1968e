#!/usr/bin/env python3
"""
CLI interface for the document detection module.

Usage:
    python -m document_detection -i photo.jpg
    python -m document_detection -i photo.jpg -o crop.png --overlay overlay.png
"""

import argparse
import logging
import sys
from pathlib import Path

import cv2

from .bounds import RegionOfInterest
from .config import DetectionConfig, QualityConfig
from .detector import DocumentDetector
from .mapping import MappingParams, ScaleMode
from .quality import ReferenceSpace
from .types import CoordinateSpace, Frame, InvalidFrameError
from .visualizer import DocumentVisualizer


def _pair(value: str, sep: str, count: int):
    parts = value.replace(" ", "").split(sep)
    if len(parts) != count:
        raise argparse.ArgumentTypeError(f"Expected {count} values separated by '{sep}', got {value!r}")
    try:
        return [float(p) for p in parts]
    except ValueError:
        raise argparse.ArgumentTypeError(f"Not a number in {value!r}")


def parse_roi(value: str) -> RegionOfInterest:
    return RegionOfInterest(*_pair(value, ",", 4))


def parse_size(value: str):
    return tuple(_pair(value.lower(), "x", 2))


def parse_args(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog='python -m document_detection',
        description='Detect a document in an image and crop it with perspective correction',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:

  # Print the detected corners and quality
  python -m document_detection -i photo.jpg

  # Save the flattened document and a preview with the outline
  python -m document_detection -i photo.jpg -o crop.png --overlay overlay.png

  # Restrict the search to a region and judge quality on a 1080x1920 screen
  python -m document_detection -i photo.jpg --roi 100,200,800,600 --space view --view-size 1080x1920

Configuration:
  Detection and quality thresholds can be overridden with DOCDETECT_* and
  DOCQUALITY_* environment variables or a .env file in the working directory.
        """
    )

    parser.add_argument('-i', '--input', required=True, help='Input image')
    parser.add_argument('-o', '--output', help='Write the perspective-corrected crop here')
    parser.add_argument('--overlay', help='Write the input with the detected outline here')
    parser.add_argument('--roi', type=parse_roi, help='Search region X,Y,W,H in upright image pixels')
    parser.add_argument(
        '--space',
        choices=[s.value for s in ReferenceSpace],
        default=ReferenceSpace.IMAGE.value,
        help='Quality rule: absolute pixel margins (image) or ratios on a viewport (view)'
    )
    parser.add_argument(
        '--view-size',
        type=parse_size,
        help='Viewport WxH for --space view (default: the image size)'
    )
    parser.add_argument(
        '--rotation',
        type=int,
        default=0,
        choices=[0, 90, 180, 270],
        help='Clockwise rotation that makes the input upright'
    )
    parser.add_argument('--verbose', action='store_true', help='Log pipeline statistics')

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main CLI function"""
    args = parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s')

    if not Path(args.input).exists():
        print(f"❌ Error: input file not found: {args.input}")
        return 1

    image = cv2.imread(args.input, cv2.IMREAD_COLOR)
    if image is None:
        print(f"❌ Error: cannot read image: {args.input}")
        return 1

    try:
        detector = DocumentDetector(DetectionConfig.from_env(), QualityConfig.from_env())
        frame = Frame.from_array(image, rotation=args.rotation)
    except (ValueError, InvalidFrameError) as e:
        print(f"❌ Error: {e}")
        return 1

    print(f"📄 Processing: {Path(args.input).name}")
    result = detector.detect(frame, args.roi)
    print(f"   Frame: {result.frame_width}x{result.frame_height}")

    if not result.found:
        print("❌ No document found")
        return 1

    rectangle = result.rectangle
    print(f"   Edge pass: {result.edge_pass.value}")
    for name, point in zip(("top-left", "top-right", "bottom-left", "bottom-right"), rectangle.corners):
        print(f"   {name:>12}: ({point.x:.1f}, {point.y:.1f})")

    space = ReferenceSpace(args.space)
    if space is ReferenceSpace.VIEW:
        view_size = args.view_size or (result.frame_width, result.frame_height)
        params = MappingParams(
            image_size=(result.frame_width, result.frame_height),
            view_size=view_size,
            scale_mode=ScaleMode.FILL
        )
        judged = detector.map_coordinates(rectangle, CoordinateSpace.IMAGE, CoordinateSpace.VIEW, params)
        quality = detector.evaluate_quality(judged, view_size[0], view_size[1], space)
    else:
        quality = detector.evaluate_quality(rectangle, result.frame_width, result.frame_height, space)
    print(f"   Quality ({space.value}): {quality.name}")

    if args.output:
        cropped = detector.warp_and_crop(frame, rectangle)
        cv2.imwrite(args.output, cropped.data)
        print(f"✅ Crop saved: {args.output} ({cropped.width}x{cropped.height})")

    if args.overlay:
        upright = detector.preprocessor.to_upright(frame)
        overlay = DocumentVisualizer().visualize_with_info(upright, rectangle, quality)
        cv2.imwrite(args.overlay, overlay)
        print(f"✅ Overlay saved: {args.overlay}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
