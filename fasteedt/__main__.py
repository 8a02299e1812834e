#!/usr/bin/env python3
"""
Command-line interface for the squared distance transform.

This module allows the package to be run as:
    python -m fasteedt mask.png distances.npy [options]
    python -m fasteedt --roi 100 100 10 10 50 50 distances.npy
"""

import argparse
import logging

import numpy as np

from . import (
    __version__,
    binarize_image,
    distance_to_image,
    load_image,
    roi_to_mask,
    save_image,
    squared_distance_transform,
)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="fasteedt",
        description="Exact squared Euclidean distance transform of a binary mask"
    )
    parser.add_argument("input", nargs="?", default=None,
                        help="Input mask image (omit when using --roi)")
    parser.add_argument("output", help="Output .npy file for the squared distances")
    parser.add_argument("--roi", type=int, nargs=6, default=None,
                        metavar=("FOV_W", "FOV_H", "X", "Y", "W", "H"),
                        help="Build the mask from a rectangular ROI (1-based origin)")
    parser.add_argument("-t", "--threshold", type=float, default=None,
                        help="Binarization threshold (default: mean intensity)")
    parser.add_argument("--invert", action="store_true",
                        help="Treat dark pixels as foreground")
    parser.add_argument("--parallel", action="store_true",
                        help="Process columns and rows in parallel")
    parser.add_argument("--preview", type=str, default=None,
                        help="Also save an 8-bit preview image to this path")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")
    parser.add_argument("--version", action="version",
                        version=f"%(prog)s {__version__}")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    if (args.input is None) == (args.roi is None):
        parser.error("give exactly one of an input image or --roi")

    if args.roi is not None:
        try:
            mask = roi_to_mask(*args.roi)
        except ValueError as e:
            parser.error(str(e))
        print(f"Built ROI mask: {mask.shape}")
    else:
        print(f"Loading {args.input}...")
        img = load_image(args.input)
        print(f"  Image shape: {img.shape}")
        mask = binarize_image(img, args.threshold, args.invert)

    print(f"  Foreground pixels: {int(np.count_nonzero(mask))}")

    dist = squared_distance_transform(mask, parallel=args.parallel)

    print(f"Saving squared distances to {args.output}...")
    np.save(args.output, dist)

    if args.preview:
        save_image(distance_to_image(dist), args.preview)

    print("Done!")
    return 0


if __name__ == "__main__":
    main()
