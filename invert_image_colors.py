#!/usr/bin/env python3
"""
Invert Image Colors - Demo Program

Loads an image, replaces every pixel with its negative and saves the result.
The output format follows the output file extension (png, jpg, gif).

Usage:
    python invert_image_colors.py input.png output.jpg
"""

import argparse
from typing import List, Optional

from image_shell import PixelBuffer
from problems import Problem
from sys_utils import die


def invert_image(image: PixelBuffer) -> None:
    """Invert colors of every pixel in place"""
    for y in range(image.height):
        for x in range(image.width):
            image.set_pixel(x, y, image.get_pixel(x, y).inverted())


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description='Invert colors of an image')
    parser.add_argument('input', help='Image to read')
    parser.add_argument('output', help='Where to save the inverted image (.png, .jpg, .gif)')
    args = parser.parse_args(argv)

    try:
        image = PixelBuffer.load_from_file(args.input)
        invert_image(image)
        image.save_to_file(args.output)
    except Problem as e:
        die("ERROR: %s", e)

    return 0


if __name__ == '__main__':
    exit(main())
