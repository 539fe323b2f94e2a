"""
Image Shell - Imperative Shell

PixelBuffer: raster image with bounds-checked pixel access, in-place rescale,
composition, and format-aware load/save.

Handles file I/O through Pillow and delegates checks, format inference and
resampling to pure functions in image_core.py.
"""

from pathlib import Path
from typing import BinaryIO, Optional, Union
import io
import os

import numpy as np  # type: ignore
from PIL import Image, UnidentifiedImageError  # type: ignore

from color_types import Color
from image_core import (
    check_dimensions,
    check_position,
    clip_paste_region,
    determine_image_format,
    prepare_for_format,
    resample_pixels,
    to_rgb_array,
)
from problems import (
    DecodeError,
    EncodeError,
    OutOfRangeError,
    check_not_none,
)


ImageSource = Union[bytes, bytearray, str, os.PathLike, BinaryIO]


class PixelBuffer:
    """Raster image held entirely in memory

    Backed by a private Pillow image in RGBA mode. Alpha is carried through
    unchanged; every public operation works on RGB Color values.

    Create instances with decode(), load_from_file() or create_empty().
    A buffer exclusively owns its pixels: copy() and paste_from() copy data,
    they never share it. Not safe for concurrent mutation.
    """

    def __init__(self, backend: Image.Image):
        """Wrap an existing Pillow image (taken over, not copied)

        Args:
            backend: Pillow image; converted to RGBA if needed
        """
        check_not_none(backend, "image backend")
        if backend.mode != "RGBA":
            backend = backend.convert("RGBA")
        self._backend = backend

    # ========================================================================
    # Factories
    # ========================================================================

    @classmethod
    def decode(cls, source: ImageSource) -> 'PixelBuffer':
        """Decode an image from bytes, a file path or a binary file object

        Imperative shell: performs file I/O.

        Args:
            source: Encoded image bytes, path to an image file, or open binary stream

        Returns:
            Decoded image

        Raises:
            InvalidArgumentError: If source is None
            DecodeError: If the file is missing or unreadable, the data is not
                a supported image, or the image exceeds the dimension limit
        """
        check_not_none(source, "image source")

        if isinstance(source, (bytes, bytearray)):
            stream = io.BytesIO(bytes(source))
            label = "<bytes>"
        elif isinstance(source, (str, os.PathLike)):
            path = Path(source)
            if not path.is_file():
                raise DecodeError(f"Failed to load image from '{path}' (file not found).")
            stream = path
            label = str(path)
        else:
            stream = source
            label = getattr(source, "name", "<stream>")

        try:
            with Image.open(stream) as opened:
                backend = opened.convert("RGBA")
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise DecodeError(f"Failed to load image from '{label}' ({e}).") from e

        try:
            check_dimensions(backend.width, backend.height)
        except OutOfRangeError as e:
            raise DecodeError(f"Failed to load image from '{label}' ({e}).") from e

        return cls(backend)

    @classmethod
    def load_from_file(cls, path: Union[str, os.PathLike]) -> 'PixelBuffer':
        """Load image from a file on disk (see decode())"""
        check_not_none(path, "image path")
        return cls.decode(os.fspath(path))

    @classmethod
    def create_empty(cls, width: int, height: int, background: Color) -> 'PixelBuffer':
        """Create an opaque image filled with one color

        Args:
            width: Width in pixels, 1 to MAX_DIMENSION
            height: Height in pixels, 1 to MAX_DIMENSION
            background: Initial color of every pixel

        Raises:
            InvalidArgumentError: If background is None
            OutOfRangeError: If a dimension is out of range
        """
        check_not_none(background, "background color")
        check_dimensions(width, height)

        return cls(Image.new("RGBA", (width, height), (*background.to_tuple(), 255)))

    # ========================================================================
    # Pixel Access
    # ========================================================================

    @property
    def width(self) -> int:
        return self._backend.width

    @property
    def height(self) -> int:
        return self._backend.height

    def get_pixel(self, x: int, y: int) -> Color:
        """Color at (x, y), zero based, x left to right, y top to bottom

        Raises:
            OutOfRangeError: If the position lies outside the image
        """
        check_position(x, y, self.width, self.height)

        red, green, blue, _alpha = self._backend.getpixel((x, y))
        return Color(red, green, blue)

    def set_pixel(self, x: int, y: int, color: Color) -> None:
        """Set color at (x, y); the pixel keeps its current alpha

        Raises:
            OutOfRangeError: If the position lies outside the image
            InvalidArgumentError: If color is None
        """
        check_position(x, y, self.width, self.height)
        check_not_none(color, "new pixel color")

        alpha = self._backend.getpixel((x, y))[3]
        self._backend.putpixel((x, y), (*color.to_tuple(), alpha))

    # ========================================================================
    # Whole-Image Operations
    # ========================================================================

    def rescale(self, new_width: int, new_height: int) -> None:
        """Resize the image in place with smooth resampling

        Args:
            new_width: Target width, 1 to MAX_DIMENSION
            new_height: Target height, 1 to MAX_DIMENSION

        Raises:
            OutOfRangeError: If a dimension is out of range
        """
        check_dimensions(new_width, new_height)

        pixels = np.array(self._backend, dtype=np.uint8)
        resized = resample_pixels(pixels, new_width, new_height)
        self._backend = Image.fromarray(resized)

    def paste_from(self, other: 'PixelBuffer', x: int, y: int) -> None:
        """Copy all pixels of another image into this one

        Pixels (alpha included) overwrite the destination, no blending.
        Only the anchor is validated: any part of other reaching past the
        right or bottom edge is clipped silently.

        Args:
            other: Image to insert
            x: X of the top-left corner of the inserted image
            y: Y of the top-left corner of the inserted image

        Raises:
            InvalidArgumentError: If other is None
            OutOfRangeError: If (x, y) lies outside this image
        """
        check_not_none(other, "image to be pasted")
        check_position(x, y, self.width, self.height)

        visible_width, visible_height = clip_paste_region(
            (self.width, self.height),
            (other.width, other.height),
            x, y
        )
        # crop() returns a detached copy, so pasting self onto self is safe
        region = other._backend.crop((0, 0, visible_width, visible_height))
        self._backend.paste(region, (x, y))

    def copy(self) -> 'PixelBuffer':
        """Independent copy of this image"""
        return PixelBuffer(self._backend.copy())

    def to_rgb_array(self) -> np.ndarray:
        """Pixels as a (height, width, 3) uint8 RGB array, alpha dropped"""
        return to_rgb_array(self._backend)

    # ========================================================================
    # Saving (Imperative Shell)
    # ========================================================================

    def save_to_file(
        self,
        path: Union[str, os.PathLike],
        format_hint: Optional[str] = None
    ) -> None:
        """Save image to a file

        The format (PNG, JPEG, GIF) comes from format_hint when given,
        otherwise from the file extension (case-insensitive). JPEG output is
        flattened to RGB first because JPEG cannot store alpha.

        Args:
            path: Destination file path
            format_hint: Optional explicit format, e.g. "png"

        Raises:
            InvalidArgumentError: If path is None
            UnsupportedFormatError: If the format cannot be determined
            EncodeError: If the encoder fails to write the file
        """
        check_not_none(path, "file path")

        format_tag = determine_image_format(path, format_hint)
        to_save = prepare_for_format(self._backend, format_tag)
        try:
            to_save.save(path, format=format_tag)
        except (OSError, ValueError) as e:
            raise EncodeError(
                f"Failed to save image to '{os.fspath(path)}' as {format_tag} ({e})."
            ) from e

    def to_bytes(self, format_hint: str) -> bytes:
        """Encode image in memory using the same format rules as save_to_file()

        Raises:
            InvalidArgumentError: If format_hint is None
            UnsupportedFormatError: If the format is not recognized
            EncodeError: If the encoder fails
        """
        check_not_none(format_hint, "image format")

        format_tag = determine_image_format("", format_hint)
        to_save = prepare_for_format(self._backend, format_tag)
        buffer = io.BytesIO()
        try:
            to_save.save(buffer, format=format_tag)
        except (OSError, ValueError) as e:
            raise EncodeError(f"Failed to encode image as {format_tag} ({e}).") from e
        return buffer.getvalue()

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height})"
