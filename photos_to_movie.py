#!/usr/bin/env python3
"""
Photos to Movie - Demo Program

Creates a slideshow video from still images: every photo is shown for a
while, then cross-faded into the next one.

Usage:
    python photos_to_movie.py output.mp4 first.jpg second.png third.jpg
    python photos_to_movie.py --fps 30 --quiet output.mp4 *.jpg
"""

import argparse
from typing import Iterator, List, Optional, Tuple

from image_shell import PixelBuffer
from movie_shell import DEFAULT_FPS, Movie
from problems import Problem
from sys_utils import die


STILL_FRAMES = 100
BLEND_FRAMES = 50
FRAME_SIZE: Tuple[int, int] = (480, 270)


# ============================================================================
# Frame Building
# ============================================================================

def load_frame(path: str, size: Tuple[int, int] = FRAME_SIZE) -> PixelBuffer:
    """Load an image and rescale it to the frame size"""
    image = PixelBuffer.load_from_file(path)
    image.rescale(*size)
    return image


def blend_images(image: PixelBuffer, image_ratio: int, other: PixelBuffer, other_ratio: int) -> None:
    """Blend other into image in place, weighting the two by the given ratios

    Both images must have the same size.
    """
    for y in range(image.height):
        for x in range(image.width):
            original = image.get_pixel(x, y)
            dest = other.get_pixel(x, y)
            image.set_pixel(x, y, original.blend(dest, image_ratio, other_ratio))


def crossfade_frames(
    previous: PixelBuffer,
    current: PixelBuffer,
    blend_frames: int = BLEND_FRAMES
) -> Iterator[PixelBuffer]:
    """Yield frames fading from previous to current

    Frame j mixes previous and current in ratio (blend_frames - j) : j, so the
    first frame equals previous and current itself is never reached.
    """
    for j in range(blend_frames):
        frame = previous.copy()
        blend_images(frame, blend_frames - j, current, j)
        yield frame


def slideshow_frames(
    paths: List[str],
    size: Tuple[int, int] = FRAME_SIZE,
    still_frames: int = STILL_FRAMES,
    blend_frames: int = BLEND_FRAMES
) -> Iterator[PixelBuffer]:
    """Yield every frame of the slideshow, loading images lazily"""
    previous = load_frame(paths[0], size)
    for _ in range(still_frames):
        yield previous

    for path in paths[1:]:
        current = load_frame(path, size)
        yield from crossfade_frames(previous, current, blend_frames)
        for _ in range(still_frames):
            yield current
        previous = current


# ============================================================================
# Command Line
# ============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description='Create a slideshow video from still images',
        epilog="""
Examples:
  python photos_to_movie.py out.mp4 a.jpg b.jpg c.jpg
  python photos_to_movie.py --width 1280 --height 720 out.mp4 *.png
        """
    )
    parser.add_argument('output', help='Output video file (.mp4)')
    parser.add_argument('images', nargs='+', help='Images in presentation order')
    parser.add_argument('--width', type=int, default=FRAME_SIZE[0],
                        help=f'Frame width (default: {FRAME_SIZE[0]})')
    parser.add_argument('--height', type=int, default=FRAME_SIZE[1],
                        help=f'Frame height (default: {FRAME_SIZE[1]})')
    parser.add_argument('--fps', type=int, default=DEFAULT_FPS,
                        help=f'Frames per second (default: {DEFAULT_FPS})')
    parser.add_argument('--quiet', action='store_true',
                        help='Do not print progress')
    args = parser.parse_args(argv)

    try:
        with Movie.create_mp4(args.output, fps=args.fps) as movie:
            for frame in slideshow_frames(args.images, (args.width, args.height)):
                movie.add_frame(frame)
                if not args.quiet:
                    print(".", end="", flush=True)
    except Problem as e:
        die("\nERROR: %s", e)

    if not args.quiet:
        print(" done.")
    return 0


if __name__ == '__main__':
    exit(main())
