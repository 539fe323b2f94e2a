"""
Image Core - Functional Core

Pure functions behind PixelBuffer: argument checks, format inference,
resampling, encoder preparation and paste clipping.
No side effects: no file I/O, no printing.

Architecture: Functional core (this file) called by imperative shell (image_shell.py)
"""

from typing import Dict, Optional, Tuple, Union
import os

import numpy as np  # type: ignore
from PIL import Image  # type: ignore
import cv2  # type: ignore

from problems import UnsupportedFormatError, check_in_range
from sys_utils import get_file_extension


# Artificial per-axis limit so that beginner code cannot allocate runaway images.
MAX_DIMENSION = 32767

# File extension -> Pillow format tag
SUPPORTED_FORMATS: Dict[str, str] = {
    "png": "PNG",
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "gif": "GIF",
}

# Formats whose encoders have no alpha channel
OPAQUE_FORMATS = frozenset({"JPEG"})


# ============================================================================
# Argument Checks
# ============================================================================

def check_dimensions(width: int, height: int) -> None:
    """Check that both dimensions lie in [1, MAX_DIMENSION]

    Raises:
        OutOfRangeError: When either dimension is too small or too big
    """
    check_in_range("image width", width, 1, MAX_DIMENSION + 1)
    check_in_range("image height", height, 1, MAX_DIMENSION + 1)


def check_position(x: int, y: int, width: int, height: int) -> None:
    """Check that (x, y) addresses a pixel of a width x height image

    Raises:
        OutOfRangeError: When one of the coordinates is out of range
    """
    check_in_range("x coordinate", x, 0, width)
    check_in_range("y coordinate", y, 0, height)


# ============================================================================
# Format Inference
# ============================================================================

def format_from_hint(hint: str) -> str:
    """Map an extension-like hint ('png', 'JPG', '.jpeg') to a format tag

    Raises:
        UnsupportedFormatError: If the hint is not a recognized format
    """
    key = hint.strip().lstrip(".").lower()
    try:
        return SUPPORTED_FORMATS[key]
    except KeyError:
        raise UnsupportedFormatError(
            f"Unsupported image format '{hint}' "
            f"(expected one of: {', '.join(sorted(SUPPORTED_FORMATS))})."
        ) from None


def determine_image_format(
    path: Union[str, os.PathLike],
    format_hint: Optional[str] = None
) -> str:
    """Determine the Pillow format tag used to save an image

    Args:
        path: Destination path; its extension decides the format
        format_hint: Explicit format that takes precedence over the extension

    Returns:
        One of 'PNG', 'JPEG', 'GIF'

    Raises:
        UnsupportedFormatError: When the extension is missing or unknown

    Examples:
        >>> determine_image_format("photo.JPG")
        'JPEG'
        >>> determine_image_format("out", format_hint="png")
        'PNG'
    """
    if format_hint is not None:
        return format_from_hint(format_hint)

    extension = get_file_extension(path)
    if extension not in SUPPORTED_FORMATS:
        raise UnsupportedFormatError(
            f"Failed to determine image format from path '{os.fspath(path)}'."
        )
    return SUPPORTED_FORMATS[extension]


def prepare_for_format(image: Image.Image, format_tag: str) -> Image.Image:
    """Convert an image into a representation the encoder accepts

    JPEG cannot store alpha, so the image is flattened to 3-channel RGB by
    dropping the alpha band. Other formats get the image unchanged.

    Args:
        image: Pillow image (usually RGBA)
        format_tag: Target format tag

    Returns:
        Image to hand to the encoder (a new image when converted)
    """
    if format_tag in OPAQUE_FORMATS and image.mode != "RGB":
        return image.convert("RGB")
    return image


# ============================================================================
# Resampling
# ============================================================================

def choose_interpolation(
    old_size: Tuple[int, int],
    new_size: Tuple[int, int]
) -> int:
    """Pick an OpenCV interpolation flag for a resize

    Area averaging whenever either axis shrinks, bilinear otherwise.
    """
    old_width, old_height = old_size
    new_width, new_height = new_size
    if new_width < old_width or new_height < old_height:
        return cv2.INTER_AREA
    return cv2.INTER_LINEAR


def resample_pixels(pixels: np.ndarray, width: int, height: int) -> np.ndarray:
    """Smoothly resample a (H, W, C) uint8 pixel array to a new size

    Pure function - returns a new array, input is not modified.

    Args:
        pixels: Source array, shape (height, width, channels)
        width: Target width in pixels
        height: Target height in pixels

    Returns:
        Array of shape (height, width, channels), dtype uint8

    Examples:
        >>> src = np.zeros((10, 20, 4), dtype=np.uint8)
        >>> resample_pixels(src, 5, 3).shape
        (3, 5, 4)
    """
    old_height, old_width = pixels.shape[:2]
    interpolation = choose_interpolation((old_width, old_height), (width, height))
    resized = cv2.resize(
        np.ascontiguousarray(pixels),
        (width, height),
        interpolation=interpolation
    )
    # cv2 drops a trailing channel axis of size 1
    if resized.ndim == 2 and pixels.ndim == 3:
        resized = resized[:, :, np.newaxis]
    return resized


# ============================================================================
# Composition
# ============================================================================

def clip_paste_region(
    dest_size: Tuple[int, int],
    source_size: Tuple[int, int],
    x: int,
    y: int
) -> Tuple[int, int]:
    """Size of the part of the source that lands inside the destination

    The anchor (x, y) is assumed to be inside the destination already.

    Args:
        dest_size: (width, height) of the destination
        source_size: (width, height) of the pasted image
        x: Anchor X in the destination
        y: Anchor Y in the destination

    Returns:
        (visible_width, visible_height), each at least 1

    Examples:
        >>> clip_paste_region((10, 10), (4, 4), 8, 0)
        (2, 4)
    """
    dest_width, dest_height = dest_size
    source_width, source_height = source_size
    return (
        min(source_width, dest_width - x),
        min(source_height, dest_height - y)
    )


# ============================================================================
# Frame Conversion
# ============================================================================

def to_rgb_array(image: Image.Image) -> np.ndarray:
    """Convert a Pillow image to an (H, W, 3) uint8 RGB array, alpha dropped

    Examples:
        >>> img = Image.new('RGBA', (4, 2), (255, 0, 0, 128))
        >>> to_rgb_array(img).shape
        (2, 4, 3)
    """
    if image.mode != "RGB":
        image = image.convert("RGB")
    return np.array(image, dtype=np.uint8)
